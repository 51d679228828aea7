"""Parse free-text order utterances into order lines.

Examples:
    "Timo en Bart een biertje en pizza"  -> Timo bier, Timo pizza, Bart bier, Bart pizza
    "Timo 2 bier"                        -> Timo bier x2
    "Timo 2 bier, Bart cola"             -> Timo bier x2, Bart cola
    "2 cola"                             -> cola x2, unassigned

An utterance starts with a people span (names joined by "en"/"and"),
followed by item segments separated by conjunctions or commas. Each
segment is matched against ``ITEM_SEGMENT_RULES`` in order; the first
rule that matches wins.
"""

import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from tabsplit.domain.errors import NoMatchError, ParseError
from tabsplit.domain.order import OrderLine, Person
from tabsplit.orders.catalog import ItemCatalog, get_default_catalog
from tabsplit.receipt.numbers import parse_quantity

logger = logging.getLogger(__name__)

CONJUNCTIONS = frozenset({"en", "and", "&", "+"})
ARTICLES = frozenset({"een", "a", "an", "'n"})

_CLAUSE_SEPARATOR = re.compile(r"[,;\n]+")
_TOKEN_EDGE_PUNCTUATION = "\"()[]{}.!?:"
_HAS_LETTER = re.compile(r"[^\W\d_]")


@dataclass
class ItemMention:
    """One item segment of an utterance before it becomes order lines."""

    label: str
    quantity: int = 1
    # True when the quantity was written as a number ("2 bier")
    explicit_quantity: bool = False


@dataclass
class _OrderGroup:
    people: list[str]
    items: list[ItemMention]
    # True once any segment matched an item rule, even if it produced no line
    matched: bool = False


SegmentHandler = Callable[[re.Match[str]], ItemMention]


def _quantity_mention(match: re.Match[str]) -> ItemMention:
    return ItemMention(
        label=match.group("label"),
        quantity=parse_quantity(match.group("qty")),
        explicit_quantity=True,
    )


def _single_mention(match: re.Match[str]) -> ItemMention:
    return ItemMention(label=match.group("label"))


_SEGMENT_LABEL = r"(?P<label>.*[^\W\d_].*)"

# Ordered (name, pattern, handler) rules; first full-segment match wins.
ITEM_SEGMENT_RULES: list[tuple[str, re.Pattern[str], SegmentHandler]] = [
    ("quantity", re.compile(rf"^(?P<qty>\d+)\s*[xX×]?\s+{_SEGMENT_LABEL}$"), _quantity_mention),
    ("article", re.compile(rf"^(?:een|a|an|'n)\s+{_SEGMENT_LABEL}$", re.IGNORECASE), _single_mention),
    ("bare", re.compile(rf"^{_SEGMENT_LABEL}$"), _single_mention),
]


def tokenize(text: str) -> list[str]:
    """Split on whitespace and strip surrounding punctuation from every token."""
    tokens = []
    for raw in text.split():
        token = raw.strip(_TOKEN_EDGE_PUNCTUATION)
        if token:
            tokens.append(token)
    return tokens


def match_item_segment(segment: str) -> tuple[str, ItemMention]:
    """
    Match one item segment (``"2 bier"``, ``"een biertje"``, ``"pizza"``).

    Raises:
        NoMatchError: if no rule applies (e.g. a bare number).
    """
    for name, pattern, handler in ITEM_SEGMENT_RULES:
        match = pattern.fullmatch(segment)
        if match:
            return name, handler(match)
    raise NoMatchError(f"No item rule matches {segment!r}")


def _display_name(token: str) -> str:
    return token[:1].upper() + token[1:]


def _known_name_index(known_people: Sequence[Person]) -> list[tuple[list[str], str]]:
    """(lowercased name tokens, stored name) pairs, longest names first."""
    index = []
    for person in known_people:
        name_tokens = [t.lower() for t in person.name.split()]
        if name_tokens:
            index.append((name_tokens, person.name))
    index.sort(key=lambda entry: len(entry[0]), reverse=True)
    return index


class _PeopleReader:
    """Reads the leading people span of a token list."""

    def __init__(self, known_people: Sequence[Person], catalog: ItemCatalog) -> None:
        self.known_index = _known_name_index(known_people)
        self.catalog = catalog

    def is_name_candidate(self, token: str) -> bool:
        lowered = token.lower()
        if lowered in CONJUNCTIONS or lowered in ARTICLES:
            return False
        if not _HAS_LETTER.search(token):
            return False
        try:
            parse_quantity(token)
        except ParseError:
            pass
        else:
            return False
        return not self.catalog.is_known(token)

    def read_person(self, tokens: list[str], pos: int, require_capital: bool) -> tuple[str, int] | None:
        """Return (display name, tokens consumed) for a person starting at pos."""
        lowered = [t.lower() for t in tokens[pos:]]
        for name_tokens, stored_name in self.known_index:
            if lowered[: len(name_tokens)] == name_tokens:
                return stored_name, len(name_tokens)

        if pos >= len(tokens):
            return None
        token = tokens[pos]
        if require_capital and not token[:1].isupper():
            return None
        if not self.is_name_candidate(token):
            return None
        return _display_name(token), 1

    def read_span(self, tokens: list[str], require_capital: bool = False) -> tuple[list[str], int]:
        """Read "A en B and C" from the start; returns (names, tokens consumed)."""
        first = self.read_person(tokens, 0, require_capital)
        if first is None:
            return [], 0

        names = [first[0]]
        pos = first[1]
        while pos + 1 < len(tokens) and tokens[pos].lower() in CONJUNCTIONS:
            following = self.read_person(tokens, pos + 1, require_capital)
            if following is None:
                break
            names.append(following[0])
            pos += 1 + following[1]

        unique: list[str] = []
        for name in names:
            if all(name.lower() != seen.lower() for seen in unique):
                unique.append(name)
        return unique, pos


def _split_segments(tokens: list[str]) -> list[str]:
    """Split item tokens on conjunctions into segment strings."""
    segments: list[str] = []
    current: list[str] = []
    for token in tokens:
        if token.lower() in CONJUNCTIONS:
            if current:
                segments.append(" ".join(current))
            current = []
        else:
            current.append(token)
    if current:
        segments.append(" ".join(current))
    return segments


def _read_items(tokens: list[str]) -> tuple[list[ItemMention], bool]:
    """Item mentions in the tokens, and whether any segment matched an item rule."""
    items: list[ItemMention] = []
    matched = False
    for segment in _split_segments(tokens):
        try:
            rule, mention = match_item_segment(segment)
        except (NoMatchError, ParseError) as exc:
            logger.debug("Skipped order segment %r: %s", segment, exc)
            continue
        matched = True
        if mention.quantity <= 0:
            logger.debug("Skipped zero-quantity order segment %r", segment)
            continue
        logger.debug("Order segment %r matched rule %s", segment, rule)
        items.append(mention)
    return items, matched


def _group_clauses(text: str, reader: _PeopleReader) -> list[_OrderGroup]:
    """Split the utterance into person groups; later clauses open a group only for a clear name."""
    groups: list[_OrderGroup] = []
    for clause_index, clause in enumerate(_CLAUSE_SEPARATOR.split(text)):
        tokens = tokenize(clause)
        if not tokens:
            continue

        if clause_index == 0 or not groups:
            people, consumed = reader.read_span(tokens)
            items, matched = _read_items(tokens[consumed:])
            groups.append(_OrderGroup(people=people, items=items, matched=matched))
            continue

        people, consumed = reader.read_span(tokens, require_capital=True)
        if people and consumed < len(tokens):
            items, matched = _read_items(tokens[consumed:])
            groups.append(_OrderGroup(people=people, items=items, matched=matched))
        else:
            items, matched = _read_items(tokens)
            groups[-1].items.extend(items)
            groups[-1].matched = groups[-1].matched or matched
    return groups


def _share_quantity(item: ItemMention, person_index: int, person_count: int) -> int:
    """Quantity one person gets of an item mentioned for several people."""
    if not item.explicit_quantity:
        return 1
    # A written number is a shared total: "Timo en Bart 2 bier" is one each.
    base, remainder = divmod(item.quantity, person_count)
    return base + (1 if person_index < remainder else 0)


def _fallback_line(text: str, reader: _PeopleReader, catalog: ItemCatalog) -> list[OrderLine]:
    """First word is the person, the rest verbatim is a single item."""
    parts = text.strip().split(maxsplit=1)
    if len(parts) < 2:
        return []
    person = reader.read_person(tokenize(parts[0]), 0, require_capital=False)
    if person is None:
        if not _HAS_LETTER.search(parts[0]):
            return []
        person = (_display_name(parts[0]), 1)
    label = parts[1].strip()
    if not label:
        return []
    return [
        OrderLine(
            item_label=label,
            quantity=1,
            person_name=person[0],
            estimated_price=catalog.default_price,
        )
    ]


def parse_order_text(
    text: str | None,
    known_people: Sequence[Person] = (),
    catalog: ItemCatalog | None = None,
) -> list[OrderLine]:
    """
    Parse one utterance into order lines.

    Args:
        text: The utterance, e.g. "Timo en Bart een biertje en pizza"
        known_people: Current roster; names are matched case-insensitively
        catalog: Item synonyms and estimated prices (built-ins when omitted)

    Returns:
        Order lines grouped by person in detection order, items in insertion
        order. Lines carry an estimated price but no unit price and no id.
    """
    if not isinstance(text, str) or not text.strip():
        return []

    catalog = catalog or get_default_catalog()
    reader = _PeopleReader(known_people, catalog)

    groups = _group_clauses(text, reader)
    lines: list[OrderLine] = []
    for group in groups:
        resolved = [(item, *catalog.resolve(item.label)) for item in group.items]

        if len(group.people) <= 1:
            person_name = group.people[0] if group.people else None
            for item, label, estimate in resolved:
                lines.append(
                    OrderLine(
                        item_label=label,
                        quantity=item.quantity,
                        person_name=person_name,
                        estimated_price=estimate,
                    )
                )
            continue

        for person_index, person_name in enumerate(group.people):
            for item, label, estimate in resolved:
                quantity = _share_quantity(item, person_index, len(group.people))
                if quantity <= 0:
                    continue
                lines.append(
                    OrderLine(
                        item_label=label,
                        quantity=quantity,
                        person_name=person_name,
                        estimated_price=estimate,
                    )
                )

    if not lines and not any(group.matched for group in groups):
        lines = _fallback_line(text, reader, catalog)
        if lines:
            logger.debug("No item grammar matched %r; used first-word fallback", text)

    return lines
