"""Person roster workflows: register, rename and remove diners."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Literal

from tabsplit.domain.order import Person
from tabsplit.runtime import get_logger
from tabsplit.runtime.session_store import SessionStore

logger = get_logger(__name__)

COLOR_CYCLE = ("blue", "green", "purple", "orange", "pink", "cyan", "yellow", "red")

RosterStatus = Literal["created", "exists", "renamed", "removed", "invalid", "not_found"]


@dataclass(frozen=True)
class RosterResult:
    """Outcome of a roster change."""

    status: RosterStatus
    person: Person | None = None
    removed_orders: int = 0
    error: str | None = None


def make_initial(name: str) -> str:
    """Uppercased first letter of a display name."""
    return name.strip()[:1].upper()


def next_color(store: SessionStore) -> str:
    return COLOR_CYCLE[len(store.list_people()) % len(COLOR_CYCLE)]


def ensure_person(store: SessionStore, name: str) -> tuple[Person, bool]:
    """Return the stored person with this name, creating one if needed.

    Returns:
        (person, created)
    """
    existing = store.get_person_by_name(name)
    if existing is not None:
        return existing, False
    display = name.strip()
    person = store.add_person(display, make_initial(display), next_color(store))
    logger.info("Registered %s (%s)", person.name, person.color_tag)
    return person, True


def register_people(store: SessionStore, names: Iterable[str]) -> list[Person]:
    """Create roster entries for every name not seen before; returns the new ones."""
    created: list[Person] = []
    for name in names:
        if not name or not name.strip():
            continue
        person, is_new = ensure_person(store, name)
        if is_new:
            created.append(person)
    return created


def add_person(store: SessionStore, name: str) -> RosterResult:
    if not isinstance(name, str) or not name.strip():
        return RosterResult(status="invalid", error="Name is required")
    person, created = ensure_person(store, name)
    return RosterResult(status="created" if created else "exists", person=person)


def rename_person(store: SessionStore, person_id: str, new_name: str) -> RosterResult:
    """Rename a person, refresh the initial and move their order lines along."""
    if not isinstance(new_name, str) or not new_name.strip():
        return RosterResult(status="invalid", error="Name is required")

    person = store.get_person(person_id)
    if person is None:
        return RosterResult(status="not_found", error=f"Person not found: {person_id}")

    display = new_name.strip()
    clash = store.get_person_by_name(display)
    if clash is not None and clash.id != person_id:
        return RosterResult(status="invalid", error=f"Name already in use: {display}")

    old_key = person.name.lower()
    renamed = store.update_person(person_id, name=display, initial=make_initial(display))
    for line in store.list_orders():
        if line.id is not None and line.is_assigned and line.person_name and line.person_name.strip().lower() == old_key:
            store.update_order(line.id, person_name=display)

    logger.info("Renamed %s to %s", person.name, display)
    return RosterResult(status="renamed", person=renamed)


def remove_person(store: SessionStore, person_id: str) -> RosterResult:
    """Remove a person together with every order line assigned to them."""
    person = store.get_person(person_id)
    if person is None:
        return RosterResult(status="not_found", error=f"Person not found: {person_id}")

    key = person.name.lower()
    removed = 0
    for line in store.list_orders():
        if line.id is not None and line.is_assigned and line.person_name and line.person_name.strip().lower() == key:
            store.delete_order(line.id)
            removed += 1
    store.delete_person(person_id)

    logger.info("Removed %s and %d order line(s)", person.name, removed)
    return RosterResult(status="removed", person=person, removed_orders=removed)
