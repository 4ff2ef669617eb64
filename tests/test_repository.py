import unittest
from dataclasses import dataclass, field
from datetime import date
from typing import List

from entity_store.domain.exceptions import (
    DuplicateKeyException,
    InvalidValueException,
    NotFoundException,
)
from entity_store.domain.models import InventoryItem
from entity_store.domain.repository import Repository


def _item(item_id: int, name: str = "Cable", quantity: int = 5) -> InventoryItem:
    return InventoryItem(id=item_id, name=name, quantity=quantity, date_added=date(2024, 1, 2))


@dataclass
class _Box:
    id: int
    tags: List[str] = field(default_factory=list)


class TestRepositoryAdd(unittest.TestCase):
    def test_add_then_get_by_id(self) -> None:
        repo = Repository()
        repo.add(_item(1))

        self.assertEqual(repo.get_by_id(1), _item(1))
        self.assertEqual(len(repo), 1)
        self.assertIn(1, repo)
        self.assertTrue(repo.contains(1))

    def test_duplicate_id_raises_and_leaves_state_unchanged(self) -> None:
        repo = Repository()
        repo.add(_item(1, name="Original"))

        with self.assertRaises(DuplicateKeyException) as ctx:
            repo.add(_item(1, name="Impostor"))

        self.assertEqual(ctx.exception.entity_id, 1)
        self.assertEqual(len(repo), 1)
        self.assertEqual(repo.get_by_id(1).name, "Original")

    def test_add_none_is_rejected(self) -> None:
        repo = Repository()
        with self.assertRaises(InvalidValueException):
            repo.add(None)
        self.assertEqual(len(repo), 0)

    def test_extend_stops_at_first_duplicate(self) -> None:
        repo = Repository()
        with self.assertRaises(DuplicateKeyException):
            repo.extend([_item(1), _item(2), _item(1), _item(3)])
        self.assertEqual([e.id for e in repo.get_all()], [1, 2])

    def test_custom_key_extractor(self) -> None:
        repo = Repository(key=lambda item: item.name)
        repo.add(_item(1, name="Mouse"))

        with self.assertRaises(DuplicateKeyException):
            repo.add(_item(2, name="Mouse"))
        self.assertEqual(repo.get_by_id("Mouse").id, 1)


class TestRepositoryReads(unittest.TestCase):
    def test_get_all_preserves_insertion_order(self) -> None:
        repo = Repository()
        for item_id in (3, 1, 2):
            repo.add(_item(item_id))

        self.assertEqual([e.id for e in repo.get_all()], [3, 1, 2])
        self.assertEqual([e.id for e in repo], [3, 1, 2])

    def test_get_all_is_idempotent(self) -> None:
        repo = Repository()
        repo.add(_item(1))
        repo.add(_item(2))

        self.assertEqual(repo.get_all(), repo.get_all())

    def test_snapshots_are_independent_of_internal_state(self) -> None:
        repo = Repository()
        box = _Box(id=1, tags=["a"])
        repo.add(box)

        # None of these mutations may reach the stored entity
        box.tags.append("from-caller")
        repo.get_all()[0].tags.append("from-snapshot")
        repo.get_by_id(1).tags.append("from-get")
        snapshot = repo.get_all()
        snapshot.clear()

        self.assertEqual(repo.get_by_id(1).tags, ["a"])
        self.assertEqual(len(repo), 1)

    def test_find_first_returns_first_match_or_none(self) -> None:
        repo = Repository()
        repo.add(_item(1, quantity=2))
        repo.add(_item(2, quantity=20))
        repo.add(_item(3, quantity=30))

        self.assertEqual(repo.find_first(lambda e: e.quantity > 10).id, 2)
        self.assertIsNone(repo.find_first(lambda e: e.quantity > 100))
        self.assertEqual([e.id for e in repo.find_all(lambda e: e.quantity > 10)], [2, 3])


class TestRepositoryNotFound(unittest.TestCase):
    def test_never_added_id_is_not_found_everywhere(self) -> None:
        repo = Repository()
        repo.add(_item(1))

        with self.assertRaises(NotFoundException):
            repo.get_by_id(999)
        with self.assertRaises(NotFoundException):
            repo.remove(999)
        with self.assertRaises(NotFoundException):
            repo.update_field(999, "quantity", 3)

    def test_removed_id_is_not_found_everywhere(self) -> None:
        repo = Repository()
        repo.add(_item(1))
        repo.remove(1)

        self.assertEqual(len(repo), 0)
        with self.assertRaises(NotFoundException):
            repo.get_by_id(1)
        with self.assertRaises(NotFoundException):
            repo.remove(1)
        with self.assertRaises(NotFoundException):
            repo.update_field(1, "quantity", 3)

    def test_remove_first_by_predicate(self) -> None:
        repo = Repository()
        repo.add(_item(1, name="A"))
        repo.add(_item(2, name="B"))

        self.assertTrue(repo.remove_first(lambda e: e.name == "B"))
        self.assertFalse(repo.remove_first(lambda e: e.name == "B"))
        self.assertEqual([e.id for e in repo.get_all()], [1])

    def test_clear_drops_everything(self) -> None:
        repo = Repository()
        repo.extend([_item(1), _item(2)])
        repo.clear()

        self.assertEqual(repo.get_all(), [])
        repo.add(_item(1))
        self.assertEqual(len(repo), 1)


class TestRepositoryUpdateField(unittest.TestCase):
    def test_update_replaces_value_and_keeps_position(self) -> None:
        repo = Repository()
        repo.extend([_item(1), _item(2), _item(3)])

        updated = repo.update_field(2, "quantity", 42)

        self.assertEqual(updated.quantity, 42)
        self.assertEqual(repo.get_by_id(2).quantity, 42)
        self.assertEqual([e.id for e in repo.get_all()], [1, 2, 3])

    def test_negative_quantity_is_invalid_and_state_unchanged(self) -> None:
        repo = Repository()
        repo.add(_item(1, quantity=5))

        with self.assertRaises(InvalidValueException) as ctx:
            repo.update_field(1, "quantity", -10)

        self.assertEqual(ctx.exception.field, "quantity")
        self.assertEqual(repo.get_by_id(1).quantity, 5)

    def test_id_cannot_be_changed(self) -> None:
        repo = Repository()
        repo.add(_item(1))

        with self.assertRaises(InvalidValueException):
            repo.update_field(1, "id", 2)
        self.assertEqual(repo.get_by_id(1).id, 1)
        self.assertNotIn(2, repo)

    def test_unknown_field_is_invalid(self) -> None:
        repo = Repository()
        repo.add(_item(1))

        with self.assertRaises(InvalidValueException):
            repo.update_field(1, "colour", "red")

    def test_non_model_entities_do_not_support_updates(self) -> None:
        repo = Repository()
        repo.add(_Box(id=1))

        with self.assertRaises(InvalidValueException):
            repo.update_field(1, "tags", ["x"])


if __name__ == "__main__":
    unittest.main()
