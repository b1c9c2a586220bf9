"""
Bitget REST Client

Issues signed GET/POST calls against the Bitget REST API, unwraps the
``{code, msg, data}`` envelope and maps failures onto the Bitget error types.
"""

import json
import logging
from typing import Any, Dict, Mapping, Optional, Tuple
from urllib.parse import urlencode

import aiohttp

from ..core.exchange_config import ExchangeConfig, SUCCESS_CODE
from .bitget_auth import BitgetAuth
from .bitget_errors import BitgetAPIError, BitgetParseError, BitgetTransportError

logger = logging.getLogger(__name__)


def serialize_query(params: Optional[Mapping[str, Any]]) -> str:
    """URL-encode params in insertion order, with a leading '?' when non-empty."""
    if not params:
        return ""
    return "?" + urlencode([(key, str(value)) for key, value in params.items()])


def serialize_body(body: Optional[Mapping[str, Any]]) -> str:
    """Compact JSON for a request body, or an empty string."""
    if body is None:
        return ""
    return json.dumps(body, separators=(",", ":"))


class BitgetClient:
    """
    Bitget REST client shared by all accounts.

    The query string and body are serialized once per request and the same
    strings are both signed and transmitted.
    """

    def __init__(self, config: Optional[ExchangeConfig] = None,
                 session: Optional[aiohttp.ClientSession] = None):
        """
        Initialize the client.

        Args:
            config: Exchange configuration (base URL, timeouts)
            session: Optional externally owned aiohttp session
        """
        self.config = config or ExchangeConfig()
        self._session = session
        self._owns_session = session is None
        self._auth_cache: Dict[str, BitgetAuth] = {}

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.config.request_timeout)
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the underlying HTTP session if this client created it."""
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
            logger.info("Bitget client session closed")
        self._session = None

    def auth_for(self, account) -> BitgetAuth:
        """Signing helper for an account credential, cached per account id."""
        auth = self._auth_cache.get(account.id)
        if auth is None or auth.api_key != account.api_key:
            auth = BitgetAuth(account.api_key, account.api_secret, account.passphrase,
                              self.config.locale, self.config.time_offset_ms)
            if not auth.validate_credentials():
                logger.error(f"Account {account.name} has incomplete credentials, requests will be rejected")
            logger.debug(f"Signer ready for account {account.name} ({auth.masked_key()})")
            self._auth_cache[account.id] = auth
        return auth

    def build_request(self, account, method: str, endpoint: str,
                      params: Optional[Mapping[str, Any]] = None,
                      body: Optional[Mapping[str, Any]] = None,
                      timestamp: Optional[str] = None) -> Tuple[str, Dict[str, str], str]:
        """
        Build the URL, signed headers and body string for a request.

        Returns:
            Tuple of (url, headers, body string)
        """
        method = method.upper()
        query_string = serialize_query(params)
        request_body = serialize_body(body) if method == "POST" else ""
        headers = self.auth_for(account).get_auth_headers(
            method, endpoint, query_string, request_body, timestamp
        )
        url = f"{self.config.base_url}{endpoint}{query_string}"
        return url, headers, request_body

    async def call(self, account, method: str, endpoint: str,
                   params: Optional[Mapping[str, Any]] = None,
                   body: Optional[Mapping[str, Any]] = None) -> Any:
        """
        Issue an authenticated request and return the envelope's data field.

        Args:
            account: Account credential (id, api_key, api_secret, passphrase)
            method: GET or POST
            endpoint: Request path
            params: Query parameters
            body: JSON body for POST requests

        Raises:
            BitgetTransportError: Non-2xx HTTP status
            BitgetAPIError: Envelope code other than success
            BitgetParseError: Response body is not a JSON envelope
        """
        url, headers, request_body = self.build_request(account, method, endpoint, params, body)
        return await self._send(method.upper(), url, headers, request_body, account_name=account.name)

    async def public_get(self, endpoint: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """Unsigned GET against a public market endpoint."""
        url = f"{self.config.base_url}{endpoint}{serialize_query(params)}"
        headers = {'Content-Type': 'application/json', 'locale': self.config.locale}
        return await self._send("GET", url, headers, "")

    async def _send(self, method: str, url: str, headers: Dict[str, str],
                    request_body: str, account_name: Optional[str] = None) -> Any:
        session = await self._get_session()
        async with session.request(
            method,
            url,
            headers=headers,
            data=request_body if method == "POST" else None,
        ) as response:
            try:
                text = await response.text()
            except UnicodeDecodeError as e:
                raise BitgetParseError(f"Undecodable response body from {url}: {e}") from e

            if not 200 <= response.status < 300:
                logger.error(f"Bitget HTTP {response.status} for {method} {url}"
                             f"{f' (account {account_name})' if account_name else ''}: {text}")
                raise BitgetTransportError(response.status, text, url)

        return self._unwrap(text, url)

    @staticmethod
    def _unwrap(text: str, url: str) -> Any:
        try:
            envelope = json.loads(text)
        except json.JSONDecodeError as e:
            raise BitgetParseError(f"Invalid JSON from {url}: {e}") from e

        if not isinstance(envelope, dict) or 'code' not in envelope:
            raise BitgetParseError(f"Unexpected response shape from {url}")

        code = str(envelope.get('code'))
        if code != SUCCESS_CODE:
            raise BitgetAPIError(code, envelope.get('msg', ''))

        return envelope.get('data')
