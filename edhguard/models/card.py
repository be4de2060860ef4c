from dataclasses import dataclass, field
from enum import Enum


class LegalityStatus(str, Enum):
    """Per-format legality values recognized in card data."""

    LEGAL = "legal"
    NOT_LEGAL = "not_legal"
    RESTRICTED = "restricted"
    BANNED = "banned"


LEGALITY_VALUES = frozenset(status.value for status in LegalityStatus)


def normalize_card_name(name: str) -> str:
    """
    Normalize a card name for identity comparison.

    Two names that differ only in case (or surrounding whitespace)
    refer to the same catalog entry.
    """
    return name.strip().casefold()


@dataclass(frozen=True, slots=True)
class CardFace:
    """One face of a multi-faced card. Display-only."""

    name: str
    image_uris: dict[str, str] | None = None


@dataclass(frozen=True, slots=True)
class CardRecord:
    """
    A single card catalog entry.

    Attributes:
        name: Card name as printed (identity is case-insensitive)
        type_line: Full type line (e.g., "Legendary Creature — Angel")
        colors: Color letters in source order (W, U, B, R, G)
        color_identity: Color identity letters as given by the source
        rarity: Rarity string ("common", "uncommon", "rare", "mythic", ...)
        legalities: Format name -> legality status; absent formats are unknown
        mana_cost: Symbolic mana cost (e.g., "{2}{W}{B}")
        cmc: Converted mana cost / mana value, may be fractional
        image_uris: Image size name -> URI (display-only)
        faces: Faces of multi-faced cards (display-only)
    """

    name: str
    type_line: str
    colors: tuple[str, ...] = ()
    color_identity: tuple[str, ...] = ()
    rarity: str = ""
    legalities: dict[str, str] = field(default_factory=dict)
    mana_cost: str | None = None
    cmc: float | None = None
    image_uris: dict[str, str] | None = None
    faces: tuple[CardFace, ...] = ()

    @property
    def key(self) -> str:
        """Case-folded identity key."""
        return normalize_card_name(self.name)

    def is_complete(self) -> bool:
        """True if the record carries the fields required for persistence."""
        return bool(self.name and self.name.strip() and self.type_line and self.type_line.strip())

    def legality(self, format_name: str) -> LegalityStatus | None:
        """Legality in a format, or None when the source has no entry for it."""
        value = self.legalities.get(format_name)
        if value in LEGALITY_VALUES:
            return LegalityStatus(value)
        return None
