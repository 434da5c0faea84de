"""
Shop and inventory.

Purchases debit the wallet and add one unit to the inventory. Using an
item consumes one unit and applies its stat effect to an owned pet.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections import Counter
from typing import TYPE_CHECKING, Dict, List, Optional

from petengine.core.logging.logger import get_logger
from petengine.modules.care.actions import ActionSettings, apply_item_effect, calculate_mood
from petengine.modules.economy.settings import EconomySettings, ShopItem
from petengine.modules.shared.base_service import BaseService
from petengine.modules.shared.exceptions import InsufficientResourcesError, NotFoundError

if TYPE_CHECKING:
    from logging import Logger

    from petengine.core.config.manager import ConfigManager
    from petengine.core.event.bus import EventBus
    from petengine.domain.models.pet import Pet
    from petengine.modules.economy.wallet import Wallet
    from petengine.modules.pets.service import PetService


class Inventory(ABC):
    @abstractmethod
    async def add(self, user_id: int, item_id: str, quantity: int = 1) -> int:
        """Returns the new quantity."""

    @abstractmethod
    async def consume(self, user_id: int, item_id: str) -> bool:
        """Remove one unit; False when the user has none."""

    @abstractmethod
    async def items(self, user_id: int) -> Dict[str, int]:
        ...


class InMemoryInventory(Inventory):
    def __init__(self) -> None:
        self._items: Dict[int, Counter[str]] = {}
        self._lock = threading.Lock()

    async def add(self, user_id: int, item_id: str, quantity: int = 1) -> int:
        with self._lock:
            bag = self._items.setdefault(user_id, Counter())
            bag[item_id] += quantity
            return bag[item_id]

    async def consume(self, user_id: int, item_id: str) -> bool:
        with self._lock:
            bag = self._items.get(user_id)
            if not bag or bag[item_id] <= 0:
                return False
            bag[item_id] -= 1
            if bag[item_id] == 0:
                del bag[item_id]
            return True

    async def items(self, user_id: int) -> Dict[str, int]:
        with self._lock:
            return dict(self._items.get(user_id, {}))


class ShopService(BaseService):
    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        wallet: Wallet,
        pet_service: PetService,
        inventory: Optional[Inventory] = None,
        logger: Optional[Logger] = None,
    ) -> None:
        super().__init__(config_manager, event_bus, logger or get_logger(__name__))
        self._wallet = wallet
        self._pets = pet_service
        self._inventory = inventory or InMemoryInventory()
        self._catalog = EconomySettings.from_config(config_manager).shop_items
        self._mood = ActionSettings.from_config(config_manager).mood

    def catalog(self, category: Optional[str] = None) -> List[ShopItem]:
        return [item for item in self._catalog.values() if category is None or item.category == category]

    def _item(self, item_id: str) -> ShopItem:
        item = self._catalog.get(item_id)
        if item is None:
            raise NotFoundError("ShopItem", item_id)
        return item

    async def purchase(self, user_id: int, item_id: str) -> int:
        """
        Buy one unit of an item. Returns the new coin balance.

        Raises:
            NotFoundError: Unknown item
            InsufficientResourcesError: Not enough coins
        """
        item = self._item(item_id)
        new_balance = await self._wallet.debit(user_id, item.price)
        quantity = await self._inventory.add(user_id, item.id)

        self.log_operation("purchase_item", user_id=user_id, item_id=item.id, price=item.price)
        await self.emit_event(
            "economy.item_purchased",
            {"user_id": user_id, "item_id": item.id, "price": item.price, "quantity": quantity, "new_balance": new_balance},
        )
        return new_balance

    async def use_item(self, user_id: int, item_id: str, pet_id: int) -> Pet:
        """
        Consume one unit and apply its effect to an owned pet.

        Raises:
            NotFoundError: Unknown item or pet
            InsufficientResourcesError: The item is not in the inventory
        """
        item = self._item(item_id)
        pet = await self._pets.get_pet(user_id, pet_id)
        if not await self._inventory.consume(user_id, item.id):
            raise InsufficientResourcesError(item.id, 1, 0)

        apply_item_effect(pet, item.effect)
        pet.set_mood(calculate_mood(pet.hunger, pet.happiness, pet.energy, self._mood))
        await self._pets.save(pet)

        self.log_operation("use_item", user_id=user_id, item_id=item.id, pet_id=pet_id)
        return pet

    async def inventory(self, user_id: int) -> Dict[str, int]:
        return await self._inventory.items(user_id)
