"""
Integration tests for DatabaseService.

Runs against a real SQLite file through aiosqlite: connection, schema
creation, and commit/rollback semantics of `get_transaction`.
"""

import pytest
from sqlalchemy import select, text

from petengine.core.database.service import DatabaseService
from petengine.core.exceptions import DatabaseNotInitializedError
from petengine.database.models.wallet import WalletRow


@pytest.mark.integration
class TestDatabaseConnection:
    @pytest.mark.asyncio
    async def test_health_check(self, database):
        assert database.is_initialized() is True
        assert await database.health_check() is True

    @pytest.mark.asyncio
    async def test_schema_created(self, database):
        async with database.get_session() as session:
            result = await session.execute(text("SELECT name FROM sqlite_master WHERE type = 'table'"))
            tables = {row.name for row in result}

        assert {"challenges", "user_challenges", "wallets"} <= tables

    @pytest.mark.asyncio
    async def test_use_before_initialize(self):
        await DatabaseService.shutdown()

        with pytest.raises(DatabaseNotInitializedError):
            async with DatabaseService.get_session():
                pass


@pytest.mark.integration
class TestTransactions:
    @pytest.mark.asyncio
    async def test_commit_on_clean_exit(self, database):
        async with database.get_transaction() as session:
            session.add(WalletRow(user_id=1, coins=10))

        async with database.get_session() as session:
            coins = (await session.execute(select(WalletRow.coins).where(WalletRow.user_id == 1))).scalar_one()
        assert coins == 10

    @pytest.mark.asyncio
    async def test_rollback_on_error(self, database):
        with pytest.raises(RuntimeError):
            async with database.get_transaction() as session:
                session.add(WalletRow(user_id=2, coins=10))
                await session.flush()
                raise RuntimeError("abort")

        async with database.get_session() as session:
            row = (await session.execute(select(WalletRow).where(WalletRow.user_id == 2))).scalar_one_or_none()
        assert row is None
        assert database.get_metrics()["total_rollbacks"] == 1
