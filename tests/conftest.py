"""
Pytest configuration and shared fixtures for the pet engine test suite.

Purpose
-------
Reusable fixtures for clocks, random sources, configuration, the event
bus, repositories and fully wired services.

Architecture Notes
------------------
- Unit tests run entirely in memory
- Integration tests use a throwaway SQLite file through aiosqlite
- ConfigManager is reset around every test so overrides never leak
- Time is always driven by `FixedClock`; nothing reads the wall clock
"""

from __future__ import annotations

import os
import random
from datetime import datetime, timezone

os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ.setdefault("LOG_TO_FILE", "false")

import pytest

from petengine.core.clock import FixedClock
from petengine.core.config.manager import ConfigManager
from petengine.core.event.bus import EventBus
from petengine.domain.models.challenge import ChallengeTemplate, ChallengeType
from petengine.domain.models.pet import Pet, PetGenetics
from petengine.modules.breeding.repository import InMemoryBreedingRepository
from petengine.modules.breeding.service import BreedingService
from petengine.modules.care.service import CareService
from petengine.modules.challenges.repository import InMemoryChallengeRepository
from petengine.modules.challenges.service import ChallengeService
from petengine.modules.economy.wallet import InMemoryWallet
from petengine.modules.pets.repository import InMemoryPetRepository
from petengine.modules.pets.service import PetService

START = datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)


# ============================================================================
# CORE FIXTURES
# ============================================================================


@pytest.fixture(autouse=True)
def reset_config():
    """Fresh ConfigManager state per test."""
    ConfigManager.reset()
    yield ConfigManager
    ConfigManager.reset()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(START)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


class PublishedEvents:
    """Read-only view over a spy on `EventBus.publish`."""

    def __init__(self, spy) -> None:
        self._spy = spy

    def names(self) -> list[str]:
        return [call.args[0] for call in self._spy.call_args_list]

    def payloads(self, event_name: str) -> list[dict]:
        return [call.args[1] for call in self._spy.call_args_list if call.args[0] == event_name]


@pytest.fixture
def published(mocker, event_bus) -> PublishedEvents:
    return PublishedEvents(mocker.spy(event_bus, "publish"))


# ============================================================================
# DOMAIN FACTORIES
# ============================================================================


def make_pet(
    pet_id: int = 1,
    owner_id: int = 1,
    created_at: datetime = START,
    color: str = "brown",
    pattern: str = "solid",
    pet_type: str = "Fluffy",
    **stats,
) -> Pet:
    return Pet(
        pet_id=pet_id,
        owner_id=owner_id,
        name=f"Pet {pet_id}",
        pet_type=pet_type,
        genetics=PetGenetics(color=color, pattern=pattern),
        created_at=created_at,
        **stats,
    )


def make_template(template_id: int, challenge_type: ChallengeType | str, target: int, coins: int = 50, xp: int = 30):
    return ChallengeTemplate(
        id=template_id,
        type=ChallengeType(challenge_type),
        target=target,
        coin_reward=coins,
        xp_reward=xp,
        name=f"Challenge {template_id}",
    )


@pytest.fixture
def pet_factory():
    return make_pet


@pytest.fixture
def template_factory():
    return make_template


# ============================================================================
# WIRED SERVICES (in memory)
# ============================================================================


@pytest.fixture
def wallet() -> InMemoryWallet:
    return InMemoryWallet(max_coins=5000)


@pytest.fixture
def pet_repository() -> InMemoryPetRepository:
    return InMemoryPetRepository()


@pytest.fixture
def pet_service(event_bus, pet_repository, clock, rng) -> PetService:
    return PetService(ConfigManager, event_bus, pet_repository, clock, rng=rng)


@pytest.fixture
def challenge_repository(wallet) -> InMemoryChallengeRepository:
    templates = [make_template(1, "feed", 3), make_template(2, "play", 5), make_template(3, "happiness", 100)]
    return InMemoryChallengeRepository(templates, wallet)


@pytest.fixture
def challenge_service(event_bus, challenge_repository, clock, pet_service, rng) -> ChallengeService:
    return ChallengeService(ConfigManager, event_bus, challenge_repository, clock, pet_service=pet_service, rng=rng)


@pytest.fixture
def care_service(event_bus, pet_service, wallet, clock, challenge_service) -> CareService:
    return CareService(ConfigManager, event_bus, pet_service, wallet, clock, challenge_service=challenge_service)


@pytest.fixture
def breeding_service(event_bus, pet_service, wallet, clock, rng) -> BreedingService:
    return BreedingService(ConfigManager, event_bus, InMemoryBreedingRepository(), pet_service, wallet, clock, rng=rng)


# ============================================================================
# UTILITY FUNCTIONS
# ============================================================================


def assert_domain_event_emitted(domain_model, event_name: str) -> bool:
    """
    Usage:
        pet.apply_progression(result, xp_gained=100)
        assert assert_domain_event_emitted(pet, "pet.leveled_up")
    """
    return any(event.event_name == event_name for event in domain_model.get_pending_events())


def get_domain_event_payload(domain_model, event_name: str) -> dict | None:
    for event in domain_model.get_pending_events():
        if event.event_name == event_name:
            return event.payload
    return None
