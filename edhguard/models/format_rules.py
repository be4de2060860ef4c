"""
Deck-construction parameters per Commander variant.

Each variant fixes the deck size, which legality entry is consulted,
and which cards may lead the deck.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from edhguard.models.card import CardRecord


class FormatVariant(str, Enum):
    """Supported Commander variants."""

    STANDARD_COMMANDER = "standard-commander"
    PAUPER_COMMANDER = "pauper-commander"


def is_legendary_commander(card: CardRecord) -> bool:
    """
    Legendary creature or planeswalker.

    Cards whose rules text grants commander eligibility are not considered.
    """
    type_line = card.type_line.lower()
    if "legendary" not in type_line:
        return False
    return "creature" in type_line or "planeswalker" in type_line


def is_pauper_commander(card: CardRecord) -> bool:
    """Uncommon creature."""
    return card.rarity.lower() == "uncommon" and "creature" in card.type_line.lower()


@dataclass(frozen=True, slots=True)
class FormatRules:
    """
    Rule parameters for one variant.

    Attributes:
        variant: The variant these rules describe
        deck_size: Exact number of cards required
        legality_format: Key looked up in a card's legalities mapping
        commander_requirement: Description shown when no commander is found
        is_commander: Predicate deciding commander eligibility
    """

    variant: FormatVariant
    deck_size: int
    legality_format: str
    commander_requirement: str
    is_commander: Callable[[CardRecord], bool]

    @property
    def display_name(self) -> str:
        return FORMAT_DISPLAY_NAMES[self.variant]


FORMAT_DISPLAY_NAMES = {
    FormatVariant.STANDARD_COMMANDER: "Commander",
    FormatVariant.PAUPER_COMMANDER: "Pauper Commander",
}

STANDARD_COMMANDER_RULES = FormatRules(
    variant=FormatVariant.STANDARD_COMMANDER,
    deck_size=100,
    legality_format="commander",
    commander_requirement="a legendary creature or planeswalker",
    is_commander=is_legendary_commander,
)

PAUPER_COMMANDER_RULES = FormatRules(
    variant=FormatVariant.PAUPER_COMMANDER,
    deck_size=100,
    legality_format="paupercommander",
    commander_requirement="an uncommon creature",
    is_commander=is_pauper_commander,
)

_RULES_BY_VARIANT = {
    FormatVariant.STANDARD_COMMANDER: STANDARD_COMMANDER_RULES,
    FormatVariant.PAUPER_COMMANDER: PAUPER_COMMANDER_RULES,
}


def get_format_rules(variant: FormatVariant | str) -> FormatRules:
    """
    Resolve the rules for a variant.

    Raises:
        ValueError: If the variant is not recognized
    """
    try:
        resolved = FormatVariant(variant)
    except ValueError:
        valid = ", ".join(v.value for v in FormatVariant)
        raise ValueError(f"Unknown format variant: {variant}. Must be one of: {valid}") from None
    return _RULES_BY_VARIANT[resolved]
