"""In-memory session storage for people, order lines and receipts.

Nothing is persisted; a new process starts with an empty session.
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Any

from tabsplit.domain.order import OrderLine, Person
from tabsplit.domain.receipt import ReceiptRecord


def _new_id() -> str:
    return str(uuid.uuid4())


class SessionStore:
    """People, order lines and processed receipts of one table session."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._people: dict[str, Person] = {}
        self._orders: dict[str, OrderLine] = {}
        self._receipts: dict[str, ReceiptRecord] = {}

    # --- People ---
    def list_people(self) -> list[Person]:
        with self._lock:
            return list(self._people.values())

    def get_person(self, person_id: str) -> Person | None:
        return self._people.get(person_id)

    def get_person_by_name(self, name: str) -> Person | None:
        key = name.strip().lower()
        with self._lock:
            for person in self._people.values():
                if person.name.lower() == key:
                    return person
        return None

    def add_person(self, name: str, initial: str, color_tag: str) -> Person:
        person = Person(id=_new_id(), name=name, initial=initial, color_tag=color_tag)
        with self._lock:
            self._people[person.id] = person
        return person

    def update_person(self, person_id: str, **changes: Any) -> Person | None:
        with self._lock:
            person = self._people.get(person_id)
            if person is None:
                return None
            updated = replace(person, **changes)
            self._people[person_id] = updated
            return updated

    def delete_person(self, person_id: str) -> bool:
        with self._lock:
            return self._people.pop(person_id, None) is not None

    # --- Order lines ---
    def list_orders(self) -> list[OrderLine]:
        """All order lines in creation order."""
        with self._lock:
            return list(self._orders.values())

    def get_order(self, order_id: str) -> OrderLine | None:
        return self._orders.get(order_id)

    def add_order(self, line: OrderLine) -> OrderLine:
        stored = replace(line, id=_new_id())
        with self._lock:
            self._orders[stored.id] = stored
        return stored

    def update_order(self, order_id: str, **changes: Any) -> OrderLine | None:
        with self._lock:
            line = self._orders.get(order_id)
            if line is None:
                return None
            updated = replace(line, **changes)
            self._orders[order_id] = updated
            return updated

    def delete_order(self, order_id: str) -> bool:
        with self._lock:
            return self._orders.pop(order_id, None) is not None

    def clear_orders(self) -> None:
        with self._lock:
            self._orders.clear()

    # --- Receipts ---
    def list_receipts(self) -> list[ReceiptRecord]:
        """Processed receipts, newest first."""
        with self._lock:
            records = list(self._receipts.values())
        return sorted(records, key=lambda record: record.processed_at or datetime.min, reverse=True)

    def get_receipt(self, receipt_id: str) -> ReceiptRecord | None:
        return self._receipts.get(receipt_id)

    def add_receipt(self, record: ReceiptRecord) -> ReceiptRecord:
        stored = replace(record, id=_new_id(), processed_at=datetime.now())
        with self._lock:
            self._receipts[stored.id] = stored
        return stored
