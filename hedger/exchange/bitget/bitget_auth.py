"""
Bitget Authentication Handler

Builds the HMAC-SHA256 request signature and the ACCESS-* header set
required by every private Bitget REST endpoint.
"""

import base64
import hashlib
import hmac
import logging
import time
from typing import Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "en-US"


def generate_signature(timestamp: str, method: str, request_path: str,
                       query_string: Optional[str], body: Optional[str],
                       secret: str) -> str:
    """
    Generate a Bitget API signature.

    The prehash string is ``timestamp + METHOD + requestPath + queryString + body``.
    A missing query string or body contributes an empty string, never a
    placeholder.

    Args:
        timestamp: Request timestamp in epoch milliseconds
        method: HTTP method, any case
        request_path: Endpoint path, e.g. /api/v2/mix/account/accounts
        query_string: Serialized query including its leading '?', or empty
        body: Serialized JSON body, or empty
        secret: Account API secret

    Returns:
        Base64 encoded signature
    """
    str_to_sign = f"{timestamp}{method.upper()}{request_path}{query_string or ''}{body or ''}"

    signature = hmac.new(
        secret.encode('utf-8'),
        str_to_sign.encode('utf-8'),
        hashlib.sha256
    ).digest()

    return base64.b64encode(signature).decode('utf-8')


class BitgetAuth:
    """
    Bitget authentication handler for a single account.

    Holds the credential triple and produces signed headers for each request.
    """

    def __init__(self, api_key: str, api_secret: str, passphrase: str, locale: str = DEFAULT_LOCALE,
                 time_offset_ms: int = 0):
        """
        Initialize Bitget authentication.

        Args:
            api_key: Bitget API key
            api_secret: Bitget API secret
            passphrase: Bitget API passphrase (sent as-is, not signed)
            locale: Value of the locale header
            time_offset_ms: Server time minus local time, applied to timestamps
        """
        self.api_key = api_key
        self.api_secret = api_secret
        self.passphrase = passphrase
        self.locale = locale
        self.time_offset_ms = int(time_offset_ms)

    def now_ms(self) -> str:
        """Current timestamp in milliseconds adjusted by the server time offset."""
        return str(int(time.time() * 1000) + self.time_offset_ms)

    def sign(self, timestamp: str, method: str, request_path: str,
             query_string: str = "", body: str = "") -> str:
        """Sign a request with this account's secret."""
        return generate_signature(timestamp, method, request_path, query_string, body, self.api_secret)

    def get_auth_headers(self, method: str, request_path: str, query_string: str = "",
                         body: str = "", timestamp: Optional[str] = None) -> Dict[str, str]:
        """
        Get authentication headers for a Bitget API request.

        Args:
            method: HTTP method
            request_path: Endpoint path
            query_string: Serialized query string including '?', or empty
            body: Serialized request body, or empty
            timestamp: Fixed timestamp to use, defaults to now

        Returns:
            Dictionary of request headers
        """
        timestamp = timestamp or self.now_ms()
        signature = self.sign(timestamp, method, request_path, query_string, body)

        return {
            'ACCESS-KEY': self.api_key,
            'ACCESS-SIGN': signature,
            'ACCESS-TIMESTAMP': timestamp,
            'ACCESS-PASSPHRASE': self.passphrase,
            'Content-Type': 'application/json',
            'locale': self.locale,
        }

    def validate_credentials(self) -> bool:
        """
        Validate that the credential triple is complete.

        Returns:
            True if all parts are present, False otherwise
        """
        if not all([self.api_key, self.api_secret, self.passphrase]):
            logger.error("Bitget credentials are incomplete")
            return False
        return True

    def masked_key(self) -> str:
        """API key with the middle hidden, for logging."""
        if len(self.api_key) <= 8:
            return "***"
        return f"{self.api_key[:4]}...{self.api_key[-4:]}"
