"""Economy balance values, built from the `economy`, `daily_login`, `minigames` and `shop` sections."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from petengine.core.config.errors import ConfigValidationError
from petengine.core.config.manager import ConfigManager


@dataclass(frozen=True)
class MiniGameSpec:
    id: str
    name: str
    min_coins: int = 20
    max_coins: int = 50
    cooldown_minutes: int = 60

    def __post_init__(self) -> None:
        if self.min_coins < 0 or self.max_coins < self.min_coins:
            raise ConfigValidationError(f"mini-game {self.id}: invalid coin range")


@dataclass(frozen=True)
class ShopItem:
    id: str
    name: str
    category: str
    price: int
    effect: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.price < 0:
            raise ConfigValidationError(f"shop item {self.id}: price must be non-negative")


def _default_games() -> Dict[str, MiniGameSpec]:
    return {
        game_id: MiniGameSpec(id=game_id, name=name)
        for game_id, name in (
            ("memory-match", "Memory Match"),
            ("reaction-time", "Reaction Time"),
            ("feed-frenzy", "Feed Frenzy"),
        )
    }


@dataclass(frozen=True)
class EconomySettings:
    max_coins: int = 5000
    starting_coins: int = 100
    login_base_coins: int = 50
    login_streak_step_coins: int = 10
    login_streak_bonus_cap: int = 100
    login_claim_interval_hours: int = 24
    login_streak_window_hours: int = 48
    minigame_max_score: int = 1000
    minigames: Mapping[str, MiniGameSpec] = field(default_factory=_default_games)
    shop_items: Mapping[str, ShopItem] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.max_coins <= 0:
            raise ConfigValidationError("economy.max_coins must be positive")
        if not 0 <= self.starting_coins <= self.max_coins:
            raise ConfigValidationError("economy.starting_coins must be within [0, max_coins]")
        if self.login_streak_window_hours < self.login_claim_interval_hours:
            raise ConfigValidationError("daily_login.streak_window_hours must be >= claim_interval_hours")

    @classmethod
    def from_config(cls, config_manager=ConfigManager) -> "EconomySettings":
        games: Dict[str, MiniGameSpec] = {}
        for raw in config_manager.get("minigames.games", []) or []:
            spec = MiniGameSpec(
                id=str(raw["id"]),
                name=str(raw.get("name", raw["id"])),
                min_coins=int(raw.get("min_coins", 20)),
                max_coins=int(raw.get("max_coins", 50)),
                cooldown_minutes=int(raw.get("cooldown_minutes", 60)),
            )
            games[spec.id] = spec

        items: Dict[str, ShopItem] = {}
        for raw in config_manager.get("shop.items", []) or []:
            item = _shop_item(raw)
            items[item.id] = item

        return cls(
            max_coins=int(config_manager.get("economy.max_coins", 5000)),
            starting_coins=int(config_manager.get("economy.starting_coins", 100)),
            login_base_coins=int(config_manager.get("daily_login.base_coins", 50)),
            login_streak_step_coins=int(config_manager.get("daily_login.streak_step_coins", 10)),
            login_streak_bonus_cap=int(config_manager.get("daily_login.streak_bonus_cap", 100)),
            login_claim_interval_hours=int(config_manager.get("daily_login.claim_interval_hours", 24)),
            login_streak_window_hours=int(config_manager.get("daily_login.streak_window_hours", 48)),
            minigame_max_score=int(config_manager.get("minigames.max_score", 1000)),
            minigames=games or _default_games(),
            shop_items=items,
        )


def _shop_item(raw: Mapping[str, Any]) -> ShopItem:
    effect: Optional[Mapping[str, Any]] = raw.get("effect")
    return ShopItem(
        id=str(raw["id"]),
        name=str(raw.get("name", raw["id"])),
        category=str(raw.get("category", "misc")),
        price=int(raw["price"]),
        effect={str(stat): int(amount) for stat, amount in (effect or {}).items()},
    )
