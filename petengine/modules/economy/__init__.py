"""Coins: wallets, daily login rewards, mini-games and the shop."""

from petengine.modules.economy.login_rewards import (
    InMemoryLoginStateStore,
    LoginReward,
    LoginRewardService,
    LoginState,
    LoginStateStore,
    compute_login_reward,
    remaining_cooldown_seconds,
)
from petengine.modules.economy.minigames import GameSession, InMemoryMiniGameStore, MiniGameService, MiniGameStore
from petengine.modules.economy.settings import EconomySettings, MiniGameSpec, ShopItem
from petengine.modules.economy.shop import InMemoryInventory, Inventory, ShopService
from petengine.modules.economy.wallet import InMemoryWallet, SqlWallet, Wallet

__all__ = [
    "InMemoryLoginStateStore",
    "LoginReward",
    "LoginRewardService",
    "LoginState",
    "LoginStateStore",
    "compute_login_reward",
    "remaining_cooldown_seconds",
    "GameSession",
    "MiniGameService",
    "MiniGameStore",
    "InMemoryMiniGameStore",
    "EconomySettings",
    "MiniGameSpec",
    "ShopItem",
    "InMemoryInventory",
    "Inventory",
    "ShopService",
    "InMemoryWallet",
    "SqlWallet",
    "Wallet",
]
