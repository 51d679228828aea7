"""Order workflows: parse utterances into stored lines and edit them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from tabsplit.application.roster import ensure_person, register_people
from tabsplit.domain.order import OrderLine, Person
from tabsplit.orders.catalog import ItemCatalog
from tabsplit.orders.text_parser import parse_order_text
from tabsplit.runtime import get_logger, load_item_catalog
from tabsplit.runtime.session_store import SessionStore

logger = get_logger(__name__)

OrderTextStatus = Literal["created", "no_text", "no_orders"]
OrderUpdateStatus = Literal["updated", "deleted", "not_found", "invalid"]


@dataclass(frozen=True)
class OrderTextRequest:
    """Inputs for turning one utterance into order lines."""

    text: str
    catalog: ItemCatalog | None = None


@dataclass(frozen=True)
class OrderTextResult:
    """Outcome of an order utterance."""

    status: OrderTextStatus
    lines: list[OrderLine] = field(default_factory=list)
    new_people: list[Person] = field(default_factory=list)
    error: str | None = None


@dataclass(frozen=True)
class OrderUpdateRequest:
    """
    Edit one stored order line.

    ``quantity`` sets an absolute quantity, ``delta`` adds to the current one
    (``+1``/``-1`` buttons). A resulting quantity of 0 removes the line.
    ``person_name`` reassigns the line; ``unassign`` clears the person.
    """

    order_id: str
    quantity: int | None = None
    delta: int | None = None
    person_name: str | None = None
    unassign: bool = False


@dataclass(frozen=True)
class OrderUpdateResult:
    status: OrderUpdateStatus
    line: OrderLine | None = None
    error: str | None = None


def run_order_text(store: SessionStore, request: OrderTextRequest) -> OrderTextResult:
    """Parse an utterance against the roster, register new people and store the lines."""
    if not isinstance(request.text, str) or not request.text.strip():
        return OrderTextResult(status="no_text", error="Order text is required")

    catalog = request.catalog or load_item_catalog()
    parsed = parse_order_text(request.text, store.list_people(), catalog)
    if not parsed:
        return OrderTextResult(status="no_orders", error=f"No orders found in: {request.text}")

    new_people = register_people(store, [line.person_name for line in parsed if line.person_name])
    stored = [store.add_order(line) for line in parsed]

    logger.info("Added %d order line(s) from %r", len(stored), request.text)
    return OrderTextResult(status="created", lines=stored, new_people=new_people)


def run_order_update(store: SessionStore, request: OrderUpdateRequest) -> OrderUpdateResult:
    """Apply a quantity change and/or reassignment to one stored line."""
    line = store.get_order(request.order_id)
    if line is None:
        return OrderUpdateResult(status="not_found", error=f"Order not found: {request.order_id}")

    quantity = line.quantity
    if request.quantity is not None:
        quantity = request.quantity
    if request.delta is not None:
        quantity += request.delta
    if quantity < 0:
        return OrderUpdateResult(status="invalid", error="Quantity cannot be negative")
    if quantity == 0:
        store.delete_order(request.order_id)
        logger.info("Removed %s (quantity reached 0)", line.item_label)
        return OrderUpdateResult(status="deleted", line=line)

    person_name = line.person_name
    if request.unassign:
        person_name = None
    elif request.person_name is not None:
        if not request.person_name.strip():
            return OrderUpdateResult(status="invalid", error="Person name cannot be empty")
        person, _ = ensure_person(store, request.person_name)
        person_name = person.name

    updated = store.update_order(request.order_id, quantity=quantity, person_name=person_name)
    return OrderUpdateResult(status="updated", line=updated)


def run_order_delete(store: SessionStore, order_id: str) -> OrderUpdateResult:
    line = store.get_order(order_id)
    if line is None or not store.delete_order(order_id):
        return OrderUpdateResult(status="not_found", error=f"Order not found: {order_id}")
    return OrderUpdateResult(status="deleted", line=line)


def run_clear_orders(store: SessionStore) -> int:
    """Remove every order line; returns how many were removed."""
    count = len(store.list_orders())
    store.clear_orders()
    logger.info("Cleared %d order line(s)", count)
    return count
