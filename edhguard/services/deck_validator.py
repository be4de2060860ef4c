"""
Commander deck validation.

Each rule is an independent async check over the deck's card counts and an
optional catalog lookup. Missing catalog data never raises: a card that is
not in the catalog is simply unknown, and a rule that cannot run at all
without the catalog reports a WARNING instead of an ERROR.
"""

import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Protocol

from edhguard.db.catalog import CatalogStore
from edhguard.db.errors import EmptyCatalogError
from edhguard.models.card import CardRecord, LegalityStatus, normalize_card_name
from edhguard.models.format_rules import STANDARD_COMMANDER_RULES, FormatRules
from edhguard.models.violation import Severity, ValidationResult, Violation

logger = logging.getLogger(__name__)

# Cards whose rules text allows any number of copies
MULTIPLE_COPIES_ALLOWED = frozenset(
    {
        "relentless rats",
        "rat colony",
        "persistent petitioners",
        "shadowborn apostle",
        "thrumming stone",
    }
)


class CardLookup(Protocol):
    """Read access to card data by name."""

    async def get_by_name(self, name: str) -> CardRecord | None: ...


class CachedCardLookup:
    """
    Memoizes lookups for the duration of one validation run.

    Several rules look up the same names; misses are cached too.
    """

    def __init__(self, lookup: CardLookup):
        self._lookup = lookup
        self._cache: dict[str, CardRecord | None] = {}

    async def get_by_name(self, name: str) -> CardRecord | None:
        key = normalize_card_name(name)
        if key not in self._cache:
            self._cache[key] = await self._lookup.get_by_name(name)
        return self._cache[key]


RuleCheck = Callable[
    [Mapping[str, int], CardLookup | None, FormatRules],
    Awaitable[list[Violation]],
]


@dataclass(frozen=True, slots=True)
class DeckRule:
    """A named validation rule."""

    rule_id: str
    name: str
    description: str
    check: RuleCheck


def is_basic_land(card: CardRecord) -> bool:
    """Basic lands are exempt from the singleton rule."""
    type_line = card.type_line.lower()
    return "basic" in type_line and "land" in type_line


def allows_multiple_copies(card: CardRecord) -> bool:
    """Cards that explicitly allow any number of copies."""
    return normalize_card_name(card.name) in MULTIPLE_COPIES_ALLOWED


async def check_deck_size(
    counts: Mapping[str, int],
    lookup: CardLookup | None = None,
    format_rules: FormatRules = STANDARD_COMMANDER_RULES,
) -> list[Violation]:
    """Deck must contain exactly the variant's number of cards."""
    total_cards = sum(counts.values())
    if total_cards == format_rules.deck_size:
        return []

    return [
        Violation(
            rule_id="deck_size",
            rule_name="Deck Size",
            message=(
                f"Deck must contain exactly {format_rules.deck_size} cards. "
                f"Found {total_cards} cards."
            ),
            severity=Severity.ERROR,
        )
    ]


async def check_singleton(
    counts: Mapping[str, int],
    lookup: CardLookup | None = None,
    format_rules: FormatRules = STANDARD_COMMANDER_RULES,
) -> list[Violation]:
    """
    At most one copy of each card.

    Basic lands and named exceptions are exempt. A card that cannot be
    found is not exempt.
    """
    violations: list[Violation] = []

    for card_name, count in counts.items():
        if count <= 1:
            continue

        card = await lookup.get_by_name(card_name) if lookup is not None else None
        if card is not None and (is_basic_land(card) or allows_multiple_copies(card)):
            continue

        violations.append(
            Violation(
                rule_id="singleton",
                rule_name="Singleton Rule",
                message=f'Found {count} copies of "{card_name}". Only 1 copy allowed.',
                severity=Severity.ERROR,
                affected_cards=(card_name,),
            )
        )

    return violations


async def find_commander_candidates(
    counts: Mapping[str, int],
    lookup: CardLookup,
    format_rules: FormatRules = STANDARD_COMMANDER_RULES,
) -> list[CardRecord]:
    """Cards in the deck that may serve as its commander."""
    candidates: list[CardRecord] = []
    for card_name in counts:
        card = await lookup.get_by_name(card_name)
        if card is not None and format_rules.is_commander(card):
            candidates.append(card)
    return candidates


async def check_commander(
    counts: Mapping[str, int],
    lookup: CardLookup | None = None,
    format_rules: FormatRules = STANDARD_COMMANDER_RULES,
) -> list[Violation]:
    """Deck must contain at least one commander-eligible card."""
    if lookup is None:
        return [
            Violation(
                rule_id="commander_check",
                rule_name="Commander Required",
                message="Cannot verify commander without card database.",
                severity=Severity.WARNING,
            )
        ]

    candidates = await find_commander_candidates(counts, lookup, format_rules)
    if candidates:
        return []

    return [
        Violation(
            rule_id="commander_check",
            rule_name="Commander Required",
            message=(
                "No valid commander found. "
                f"Deck must contain {format_rules.commander_requirement}."
            ),
            severity=Severity.ERROR,
        )
    ]


async def check_format_legality(
    counts: Mapping[str, int],
    lookup: CardLookup | None = None,
    format_rules: FormatRules = STANDARD_COMMANDER_RULES,
) -> list[Violation]:
    """
    No card may be banned in the variant.

    Unknown cards and cards without a legality entry are not reported.
    """
    if lookup is None:
        return [
            Violation(
                rule_id="format_legality",
                rule_name="Format Legality",
                message="Cannot verify format legality without card database.",
                severity=Severity.WARNING,
            )
        ]

    violations: list[Violation] = []
    for card_name in counts:
        card = await lookup.get_by_name(card_name)
        if card is None:
            continue
        if card.legality(format_rules.legality_format) is LegalityStatus.BANNED:
            violations.append(
                Violation(
                    rule_id="format_legality",
                    rule_name="Format Legality",
                    message=f'"{card_name}" is banned in {format_rules.display_name} format.',
                    severity=Severity.ERROR,
                    affected_cards=(card_name,),
                )
            )

    return violations


DECK_RULES: tuple[DeckRule, ...] = (
    DeckRule(
        rule_id="deck_size",
        name="Deck Size",
        description="Deck must contain exactly the format's number of cards",
        check=check_deck_size,
    ),
    DeckRule(
        rule_id="singleton",
        name="Singleton Rule",
        description="No more than one copy of any card except basic lands and exceptions",
        check=check_singleton,
    ),
    DeckRule(
        rule_id="commander_check",
        name="Commander Required",
        description="Deck must have a card that can be its commander",
        check=check_commander,
    ),
    DeckRule(
        rule_id="format_legality",
        name="Format Legality",
        description="No card may be banned in the format",
        check=check_format_legality,
    ),
)


async def evaluate_deck(
    counts: Mapping[str, int],
    lookup: CardLookup | None = None,
    format_rules: FormatRules = STANDARD_COMMANDER_RULES,
) -> ValidationResult:
    """
    Run every rule and collect the violations.

    Args:
        counts: Case-folded card name -> number of copies
        lookup: Card data source; None when no catalog is available
        format_rules: Variant to validate against

    Returns:
        ValidationResult; valid when no violation is an ERROR
    """
    cached = CachedCardLookup(lookup) if lookup is not None else None

    violations: list[Violation] = []
    for rule in DECK_RULES:
        violations.extend(await rule.check(counts, cached, format_rules))

    return ValidationResult(
        is_valid=not any(v.is_error for v in violations),
        total_cards=sum(counts.values()),
        violations=violations,
        card_counts=dict(counts),
    )


async def require_populated_catalog(store: CatalogStore) -> int:
    """
    Ensure the catalog can answer lookups.

    Returns:
        Number of cards in the catalog

    Raises:
        StoreClosedError: If the store is not connected
        EmptyCatalogError: If the catalog holds no cards
    """
    card_count = await store.count()
    if card_count == 0:
        raise EmptyCatalogError(str(store.path))
    return card_count


async def validate_deck(
    counts: Mapping[str, int],
    store: CatalogStore,
    format_rules: FormatRules = STANDARD_COMMANDER_RULES,
) -> ValidationResult:
    """
    Validate a deck against a connected, populated catalog.

    Raises:
        StoreClosedError: If the store is not connected
        EmptyCatalogError: If the catalog holds no cards
    """
    card_count = await require_populated_catalog(store)
    logger.info(
        "Validating %d cards as %s against %d catalog entries",
        sum(counts.values()),
        format_rules.display_name,
        card_count,
    )
    return await evaluate_deck(counts, store, format_rules)
