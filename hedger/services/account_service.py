"""
Account Data Service

Keeps the in-memory account state table for every enabled account: balance,
open positions and pending orders, refreshed from the exchange on demand or
on a timer, plus the order cancellation actions.

State entries are only ever replaced as whole objects keyed by account id.
A new refresh for an account cancels that account's in-flight refresh, so a
slower, older cycle can never overwrite a fresher one.
"""

import asyncio
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from ..exchange.bitget.bitget_exchange import BitgetExchange
from ..exchange.bitget.bitget_models import BitgetBalance, BitgetPosition, BitgetOrder

logger = logging.getLogger(__name__)


class AccountStatus(Enum):
    """Refresh lifecycle of one account."""
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERRORED = "errored"


@dataclass(frozen=True)
class AccountState:
    """Latest known data for one account."""
    account_id: str
    name: str
    status: AccountStatus = AccountStatus.IDLE
    balance: Optional[BitgetBalance] = None
    positions: Tuple[BitgetPosition, ...] = field(default_factory=tuple)
    orders: Tuple[BitgetOrder, ...] = field(default_factory=tuple)
    error: Optional[str] = None
    last_updated: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'account_id': self.account_id,
            'name': self.name,
            'status': self.status.value,
            'balance': self.balance.to_dict() if self.balance else None,
            'positions': [position.to_dict() for position in self.positions],
            'orders': [order.to_dict() for order in self.orders],
            'error': self.error,
            'last_updated': self.last_updated.isoformat() if self.last_updated else None,
        }


def _settled_status(state: AccountState) -> AccountStatus:
    """Status to fall back to when a LOADING cycle is abandoned."""
    if state.status != AccountStatus.LOADING:
        return state.status
    if state.error:
        return AccountStatus.ERRORED
    return AccountStatus.READY if state.last_updated else AccountStatus.IDLE


class AccountDataService:
    """
    Fetches and holds balance, position and order data for several accounts.
    """

    def __init__(self, accounts: Iterable, exchange_factory: Callable[[Any], BitgetExchange]):
        """
        Initialize the service.

        Args:
            accounts: Account credentials; disabled ones are ignored
            exchange_factory: Builds the per-account exchange wrapper
        """
        self._accounts = {account.id: account for account in accounts if account.enabled}
        self._exchanges: Dict[str, BitgetExchange] = {
            account_id: exchange_factory(account) for account_id, account in self._accounts.items()
        }
        self._states: Dict[str, AccountState] = {
            account_id: AccountState(account_id=account_id, name=account.name)
            for account_id, account in self._accounts.items()
        }
        self._refresh_tasks: Dict[str, asyncio.Task] = {}
        self._loop_task: Optional[asyncio.Task] = None
        self.running = False

        logger.info(f"AccountDataService initialized with {len(self._accounts)} enabled accounts")

    # State access
    @property
    def account_ids(self) -> List[str]:
        return list(self._accounts.keys())

    def get_state(self, account_id: str) -> Optional[AccountState]:
        return self._states.get(account_id)

    def get_states(self) -> List[AccountState]:
        return [self._states[account_id] for account_id in self._accounts]

    def active_positions(self, account_id: Optional[str] = None,
                         symbol: Optional[str] = None) -> Dict[str, List[BitgetPosition]]:
        """
        Positions with a nonzero size, grouped by account id.

        Args:
            account_id: Only this account, if given
            symbol: Only this symbol, if given
        """
        states = self.get_states()
        if account_id is not None:
            states = [state for state in states if state.account_id == account_id]

        result = {}
        for state in states:
            result[state.account_id] = [
                position for position in state.positions
                if position.is_open and (symbol is None or position.symbol == symbol)
            ]
        return result

    def _replace_state(self, account_id: str, **changes) -> AccountState:
        state = replace(self._states[account_id], **changes)
        self._states[account_id] = state
        return state

    # Refresh
    async def refresh_account(self, account_id: str) -> AccountState:
        """
        Run one refresh cycle for an account.

        An in-flight refresh for the same account is cancelled first. If this
        cycle is itself superseded, the current state is returned.

        Raises:
            KeyError: If the account id is unknown
        """
        if account_id not in self._accounts:
            raise KeyError(account_id)

        previous = self._refresh_tasks.get(account_id)
        if previous is not None and not previous.done():
            logger.info(f"Superseding in-flight refresh for account {account_id}")
            previous.cancel()

        task = asyncio.create_task(self._refresh_cycle(account_id))
        self._refresh_tasks[account_id] = task
        try:
            return await task
        except asyncio.CancelledError:
            if task.cancelled() and self._refresh_tasks.get(account_id) is not task:
                return self._states[account_id]
            raise
        finally:
            if self._refresh_tasks.get(account_id) is task:
                del self._refresh_tasks[account_id]

    async def _refresh_cycle(self, account_id: str) -> AccountState:
        try:
            return await self._run_refresh(account_id)
        except asyncio.CancelledError:
            # Stopped rather than superseded: settle out of LOADING
            if self._refresh_tasks.get(account_id) is asyncio.current_task():
                self._replace_state(account_id, status=_settled_status(self._states[account_id]))
            raise

    async def _run_refresh(self, account_id: str) -> AccountState:
        account = self._accounts[account_id]
        exchange = self._exchanges[account_id]
        self._replace_state(account_id, status=AccountStatus.LOADING)

        try:
            balance = await exchange.get_account_balance()
            positions = await exchange.get_positions()
        except Exception as e:
            logger.error(f"Failed to refresh account {account.name}: {e}")
            return self._replace_state(account_id, status=AccountStatus.ERRORED, error=str(e))

        try:
            orders = await exchange.get_orders()
        except Exception as e:
            logger.warning(f"Orders unavailable for account {account.name}, treating as empty: {e}")
            orders = []

        state = self._replace_state(
            account_id,
            status=AccountStatus.READY,
            balance=balance,
            positions=tuple(position for position in positions if position.is_open),
            orders=tuple(orders),
            error=None,
            last_updated=datetime.now(timezone.utc),
        )
        logger.info(f"Refreshed account {account.name}: {len(state.positions)} positions, "
                    f"{len(state.orders)} orders")
        return state

    async def refresh_all(self) -> List[AccountState]:
        """Refresh every account concurrently; failures stay per account."""
        results = await asyncio.gather(
            *(self.refresh_account(account_id) for account_id in self._accounts),
            return_exceptions=True
        )
        for account_id, result in zip(self._accounts, results):
            if isinstance(result, BaseException) and not isinstance(result, asyncio.CancelledError):
                logger.error(f"Refresh task for account {account_id} failed: {result}")
        return self.get_states()

    # Order actions
    async def cancel_order(self, account_id: str, order_id: str) -> bool:
        """
        Cancel one order and drop it from local state on success.

        Unknown account or order ids are a no-op. Exchange failures are
        logged and leave state untouched.

        Returns:
            True if the order was cancelled
        """
        state = self._states.get(account_id)
        if state is None:
            logger.warning(f"Cancel requested for unknown account {account_id}")
            return False

        order = next((o for o in state.orders if o.order_id == order_id), None)
        if order is None:
            logger.warning(f"Cancel requested for unknown order {order_id} on account {account_id}")
            return False

        try:
            await self._exchanges[account_id].cancel_order(order.order_id, order.symbol, order.margin_coin or None)
        except Exception as e:
            logger.error(f"Error cancelling order {order_id} on account {state.name}: {e}")
            return False

        current = self._states[account_id]
        self._replace_state(
            account_id,
            orders=tuple(o for o in current.orders if o.order_id != order_id)
        )
        return True

    async def cancel_all_orders(self) -> Dict[str, int]:
        """
        Cancel every known open order across all accounts, one at a time.

        Not atomic: a failure on one order does not stop the rest.

        Returns:
            Counts of cancelled and failed orders
        """
        targets = [
            (state.account_id, order.order_id)
            for state in self.get_states()
            for order in state.orders
        ]

        cancelled = 0
        for account_id, order_id in targets:
            if await self.cancel_order(account_id, order_id):
                cancelled += 1

        failed = len(targets) - cancelled
        logger.info(f"Cancel-all finished: {cancelled} cancelled, {failed} failed")
        return {'cancelled': cancelled, 'failed': failed}

    # Periodic refresh
    async def _refresh_loop(self, interval: float):
        while self.running:
            try:
                await self.refresh_all()
            except Exception as e:
                logger.error(f"Error in account refresh loop: {e}")
            await asyncio.sleep(interval)

    def start(self, interval: float) -> None:
        """Start refreshing every account on a fixed interval."""
        if self.running:
            logger.warning("Account refresh loop is already running")
            return
        self.running = True
        self._loop_task = asyncio.create_task(self._refresh_loop(interval))
        logger.info(f"Account refresh loop started (every {interval}s)")

    async def stop(self) -> None:
        """Stop the refresh loop and abandon in-flight refreshes."""
        self.running = False
        tasks = list(self._refresh_tasks.values())
        if self._loop_task is not None:
            tasks.append(self._loop_task)
            self._loop_task = None

        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._refresh_tasks.clear()
        logger.info("Account refresh loop stopped")
