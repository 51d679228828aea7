"""Tests for roster management over the session store."""

from tabsplit.application.roster import (
    COLOR_CYCLE,
    add_person,
    make_initial,
    register_people,
    remove_person,
    rename_person,
)
from tabsplit.domain.order import OrderLine
from tabsplit.runtime.session_store import SessionStore


def test_register_people_creates_each_name_once(store: SessionStore) -> None:
    created = register_people(store, ["Timo", "Bart", "timo", "  "])

    assert [(p.name, p.initial, p.color_tag) for p in created] == [("Timo", "T", "blue"), ("Bart", "B", "green")]
    assert len(store.list_people()) == 2


def test_colors_cycle_after_eight_people(store: SessionStore) -> None:
    names = ["Ann", "Bob", "Cas", "Dirk", "Eva", "Fien", "Gijs", "Hans", "Ilse"]

    created = register_people(store, names)

    assert [p.color_tag for p in created] == [*COLOR_CYCLE, COLOR_CYCLE[0]]


def test_make_initial() -> None:
    assert make_initial("  timo ") == "T"
    assert make_initial("") == ""


def test_add_person_reports_existing(store: SessionStore) -> None:
    first = add_person(store, "Timo")
    again = add_person(store, "TIMO")

    assert first.status == "created"
    assert again.status == "exists"
    assert again.person == first.person
    assert add_person(store, "   ").status == "invalid"


def test_rename_updates_initial_and_order_lines(store: SessionStore) -> None:
    timo = add_person(store, "Timo").person
    assert timo is not None
    store.add_order(OrderLine(item_label="bier", person_name="Timo"))
    store.add_order(OrderLine(item_label="cola", person_name="Bart"))

    result = rename_person(store, timo.id, "Sam")

    assert result.status == "renamed"
    assert result.person is not None
    assert (result.person.name, result.person.initial) == ("Sam", "S")
    assert [line.person_name for line in store.list_orders()] == ["Sam", "Bart"]


def test_rename_rejects_names_in_use_and_unknown_ids(store: SessionStore) -> None:
    timo = add_person(store, "Timo").person
    add_person(store, "Bart")
    assert timo is not None

    assert rename_person(store, timo.id, "bart").status == "invalid"
    assert rename_person(store, timo.id, "").status == "invalid"
    assert rename_person(store, "missing", "Sam").status == "not_found"
    assert rename_person(store, timo.id, "TIMO").status == "renamed"


def test_remove_person_cascades_to_order_lines(store: SessionStore) -> None:
    timo = add_person(store, "Timo").person
    assert timo is not None
    store.add_order(OrderLine(item_label="bier", person_name="Timo"))
    store.add_order(OrderLine(item_label="pizza", person_name="timo"))
    store.add_order(OrderLine(item_label="cola", person_name="Bart"))

    result = remove_person(store, timo.id)

    assert result.status == "removed"
    assert result.removed_orders == 2
    assert [line.item_label for line in store.list_orders()] == ["cola"]
    assert store.get_person(timo.id) is None
    assert remove_person(store, timo.id).status == "not_found"
