import logging
from datetime import date, timedelta
from typing import List, Optional, TypeVar

from entity_store.application.reporting import render_items
from entity_store.domain.exceptions import (
    DuplicateKeyException,
    InvalidValueException,
    NotFoundException,
)
from entity_store.domain.models import ElectronicItem, GroceryItem
from entity_store.domain.repository import Repository

logger = logging.getLogger(__name__)

T = TypeVar("T", ElectronicItem, GroceryItem)


class WarehouseManager:
    """
    Keeps one repository per product kind and wraps its operations with
    user-facing error reporting: store errors are logged and turned into a
    False result instead of propagating.
    """

    def __init__(self, today: Optional[date] = None):
        self.today = today or date.today()
        self.electronics: Repository[ElectronicItem] = Repository(name="electronics")
        self.groceries: Repository[GroceryItem] = Repository(name="groceries")

    def seed_data(self) -> None:
        logger.info("Seeding warehouse data...")

        self.add_item(self.electronics, ElectronicItem(id=1, name="Laptop", quantity=10, brand="Dell", warranty_months=24))
        self.add_item(self.electronics, ElectronicItem(id=2, name="Smartphone", quantity=25, brand="Samsung", warranty_months=12))
        self.add_item(self.electronics, ElectronicItem(id=3, name="Router", quantity=5, brand="TP-Link", warranty_months=18))

        self.add_item(self.groceries, GroceryItem(id=101, name="Rice (5kg)", quantity=50, expiry_date=self.today + timedelta(days=365)))
        self.add_item(self.groceries, GroceryItem(id=102, name="Milk (1L)", quantity=30, expiry_date=self.today + timedelta(days=14)))
        self.add_item(self.groceries, GroceryItem(id=103, name="Eggs (dozen)", quantity=20, expiry_date=self.today + timedelta(days=21)))

    def add_item(self, repo: Repository[T], item: T) -> bool:
        try:
            repo.add(item)
        except DuplicateKeyException as e:
            logger.warning(f"[Duplicate] {e}")
            return False
        logger.info(f"Added item: {item}")
        return True

    def increase_stock(self, repo: Repository[T], item_id: int, quantity_to_add: int) -> bool:
        """Adds ``quantity_to_add`` units to an item. Negative increments are rejected."""
        try:
            if quantity_to_add < 0:
                raise InvalidValueException("Quantity to add must be non-negative.", field="quantity")
            item = repo.get_by_id(item_id)
            updated = repo.update_field(item_id, "quantity", item.quantity + quantity_to_add)
        except NotFoundException as e:
            logger.warning(f"[Not Found] {e}")
            return False
        except InvalidValueException as e:
            logger.warning(f"[Invalid Quantity] {e}")
            return False
        logger.info(f"Stock increased for ID {item_id}. New quantity: {updated.quantity}")
        return True

    def remove_item(self, repo: Repository[T], item_id: int) -> bool:
        try:
            repo.remove(item_id)
        except NotFoundException as e:
            logger.warning(f"[Not Found] {e}")
            return False
        logger.info(f"Removed item with ID {item_id}")
        return True

    def report(self) -> List[str]:
        return (
            render_items("Electronic items", self.electronics.get_all())
            + render_items("Grocery items", self.groceries.get_all())
        )
