"""
Coin wallets.

Balances never exceed `max_coins` through a credit and never go negative.
`InMemoryWallet` serializes with a lock; `SqlWallet` performs each change
as a single conditional UPDATE so it can also run inside a caller's
transaction (`credit_in_session`), which is how challenge claims pay out
atomically.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Dict

from sqlalchemy import case, select, update

from petengine.core.logging.logger import get_logger
from petengine.database.models.wallet import WalletRow
from petengine.modules.shared.base_repository import BaseRepository
from petengine.modules.shared.exceptions import InsufficientResourcesError, ValidationError
from petengine.modules.shared.formulas import capped_credit

if TYPE_CHECKING:
    from logging import Logger

    from sqlalchemy.ext.asyncio import AsyncSession

    from petengine.core.database.service import DatabaseService


def _check_amount(amount: int) -> None:
    if amount < 0:
        raise ValidationError("amount", f"amount must be non-negative, got {amount}")


class Wallet(ABC):
    """Coin balance per user."""

    max_coins: int

    @abstractmethod
    async def balance(self, user_id: int) -> int:
        ...

    @abstractmethod
    async def open_account(self, user_id: int, initial_coins: int = 0) -> int:
        """Create the account if missing and return its balance (existing balances are kept)."""

    @abstractmethod
    async def credit(self, user_id: int, amount: int) -> int:
        """Add coins up to `max_coins`; returns the new balance."""

    @abstractmethod
    async def debit(self, user_id: int, amount: int) -> int:
        """
        Remove coins; returns the new balance.

        Raises
        ------
        InsufficientResourcesError
            If the balance is lower than `amount`.
        """

    @abstractmethod
    async def all_balances(self) -> Dict[int, int]:
        ...


class InMemoryWallet(Wallet):
    def __init__(self, max_coins: int = 5000) -> None:
        self.max_coins = max_coins
        self._balances: Dict[int, int] = {}
        self._lock = threading.Lock()

    def credit_now(self, user_id: int, amount: int) -> int:
        _check_amount(amount)
        with self._lock:
            new_balance = capped_credit(self._balances.get(user_id, 0), amount, self.max_coins)
            self._balances[user_id] = new_balance
            return new_balance

    def debit_now(self, user_id: int, amount: int) -> int:
        _check_amount(amount)
        with self._lock:
            current = self._balances.get(user_id, 0)
            if current < amount:
                raise InsufficientResourcesError("coins", amount, current)
            self._balances[user_id] = current - amount
            return current - amount

    async def balance(self, user_id: int) -> int:
        with self._lock:
            return self._balances.get(user_id, 0)

    async def open_account(self, user_id: int, initial_coins: int = 0) -> int:
        _check_amount(initial_coins)
        with self._lock:
            return self._balances.setdefault(user_id, min(initial_coins, self.max_coins))

    async def credit(self, user_id: int, amount: int) -> int:
        return self.credit_now(user_id, amount)

    async def debit(self, user_id: int, amount: int) -> int:
        return self.debit_now(user_id, amount)

    async def all_balances(self) -> Dict[int, int]:
        with self._lock:
            return dict(self._balances)


class SqlWallet(BaseRepository[WalletRow], Wallet):
    def __init__(self, database: type[DatabaseService], max_coins: int = 5000, logger: Logger | None = None) -> None:
        super().__init__(WalletRow, logger or get_logger(__name__))
        self._db = database
        self.max_coins = max_coins

    async def credit_in_session(self, session: AsyncSession, user_id: int, amount: int) -> int:
        """Capped credit inside the caller's transaction; creates the row if missing."""
        _check_amount(amount)
        now = datetime.now(timezone.utc)
        new_coins = case(
            (WalletRow.coins >= self.max_coins, WalletRow.coins),
            (WalletRow.coins + amount > self.max_coins, self.max_coins),
            else_=WalletRow.coins + amount,
        )
        result = await session.execute(
            update(WalletRow)
            .where(WalletRow.user_id == user_id)
            .values(coins=new_coins, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            balance = capped_credit(0, amount, self.max_coins)
            self.add(session, WalletRow(user_id=user_id, coins=balance, created_at=now, updated_at=now))
            await session.flush()
            return balance
        return await self._read_balance(session, user_id)

    async def _read_balance(self, session: AsyncSession, user_id: int) -> int:
        result = await session.execute(select(WalletRow.coins).where(WalletRow.user_id == user_id))
        coins = result.scalar_one_or_none()
        return int(coins) if coins is not None else 0

    async def balance(self, user_id: int) -> int:
        async with self._db.get_session() as session:
            return await self._read_balance(session, user_id)

    async def open_account(self, user_id: int, initial_coins: int = 0) -> int:
        _check_amount(initial_coins)
        async with self._db.get_transaction() as session:
            existing = await self.get(session, user_id)
            if existing is not None:
                return existing.coins
            coins = min(initial_coins, self.max_coins)
            self.add(session, WalletRow(user_id=user_id, coins=coins))
            return coins

    async def credit(self, user_id: int, amount: int) -> int:
        async with self._db.get_transaction() as session:
            return await self.credit_in_session(session, user_id, amount)

    async def debit(self, user_id: int, amount: int) -> int:
        _check_amount(amount)
        async with self._db.get_transaction() as session:
            result = await session.execute(
                update(WalletRow)
                .where(WalletRow.user_id == user_id, WalletRow.coins >= amount)
                .values(coins=WalletRow.coins - amount, updated_at=datetime.now(timezone.utc))
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise InsufficientResourcesError("coins", amount, await self._read_balance(session, user_id))
            return await self._read_balance(session, user_id)

    async def all_balances(self) -> Dict[int, int]:
        async with self._db.get_session() as session:
            result = await session.execute(select(WalletRow.user_id, WalletRow.coins))
            return {int(user_id): int(coins) for user_id, coins in result.all()}
