"""Data models for people and their order lines."""

from dataclasses import dataclass
from decimal import Decimal


@dataclass
class Person:
    """A diner within one session."""

    id: str
    name: str
    initial: str
    color_tag: str = "blue"


@dataclass
class OrderLine:
    """One (person, item, quantity, price) record of a group order."""

    item_label: str
    quantity: int = 1
    person_name: str | None = None  # None means unassigned
    unit_price: Decimal | None = None
    # Catalog estimate from the order text; never treated as a receipt price.
    estimated_price: Decimal | None = None
    id: str | None = None

    @property
    def is_assigned(self) -> bool:
        return bool(self.person_name and self.person_name.strip())

    @property
    def has_price(self) -> bool:
        return self.unit_price is not None and self.unit_price != 0
