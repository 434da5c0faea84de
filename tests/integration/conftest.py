"""
Integration fixtures: a throwaway SQLite database per test.

The engine lives on the `DatabaseService` class, so every test initializes
it against its own file and shuts it down afterwards.
"""

import pytest_asyncio

from petengine.core.database.service import DatabaseService
from petengine.modules.challenges.sql_repository import SqlChallengeRepository
from petengine.modules.economy.wallet import SqlWallet


@pytest_asyncio.fixture
async def database(tmp_path):
    await DatabaseService.initialize(f"sqlite+aiosqlite:///{tmp_path / 'petengine.db'}")
    await DatabaseService.create_all()
    yield DatabaseService
    await DatabaseService.shutdown()


@pytest_asyncio.fixture
async def sql_wallet(database):
    return SqlWallet(database, max_coins=5000)


@pytest_asyncio.fixture
async def sql_challenges(database, sql_wallet, template_factory):
    repository = SqlChallengeRepository(database, sql_wallet)
    await repository.seed_templates(
        [
            template_factory(1, "feed", 3),
            template_factory(2, "play", 5),
            template_factory(3, "happiness", 100),
        ]
    )
    return repository
