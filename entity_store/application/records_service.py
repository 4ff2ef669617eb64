import logging
from datetime import date, timedelta
from typing import List, Optional, Protocol

from entity_store.application.reporting import render_items
from entity_store.domain.exceptions import DuplicateKeyException
from entity_store.domain.models import InventoryItem
from entity_store.domain.repository import Repository

logger = logging.getLogger(__name__)


class SnapshotStore(Protocol):
    def save(self, entities: Repository[InventoryItem]) -> None: ...

    def load(self) -> List[InventoryItem]: ...


class InventoryRecordsService:
    """
    An inventory log that survives restarts: seed, save, clear memory to
    simulate a new session, then load and print to confirm recovery.
    """

    def __init__(self, store: SnapshotStore, today: Optional[date] = None):
        self.store = store
        self.today = today or date.today()
        self.items: Repository[InventoryItem] = Repository(name="inventory")

    def seed_sample_data(self) -> None:
        samples = [
            InventoryItem(id=1, name="USB-C Cable", quantity=25, date_added=self.today - timedelta(days=10)),
            InventoryItem(id=2, name="Wireless Mouse", quantity=15, date_added=self.today - timedelta(days=5)),
            InventoryItem(id=3, name="Keyboard - Mechanical", quantity=8, date_added=self.today - timedelta(days=2)),
            InventoryItem(id=4, name='27" Monitor', quantity=6, date_added=self.today - timedelta(days=1)),
            InventoryItem(id=5, name="Laptop Stand", quantity=12, date_added=self.today),
        ]
        for item in samples:
            try:
                self.items.add(item)
            except DuplicateKeyException as e:
                logger.warning(f"Warning when seeding: {e}")

    def save(self) -> None:
        logger.info("Saving data to disk...")
        self.store.save(self.items)
        logger.info("Save complete.")

    def clear(self) -> None:
        self.items.clear()
        logger.info("Cleared in-memory data to simulate a new session.")

    def load(self) -> None:
        """
        Replaces the in-memory items with the stored snapshot. Records are
        re-added one by one so a duplicated id in the file is reported as a
        DuplicateKeyException; on any failure the in-memory state is kept.
        """
        logger.info("Loading data from disk...")
        loaded: Repository[InventoryItem] = Repository(name="inventory")
        loaded.extend(self.store.load())
        self.items = loaded
        logger.info(f"Load complete. {len(self.items)} item(s) in memory.")

    def report(self) -> List[str]:
        return render_items("Inventory items", self.items.get_all())
