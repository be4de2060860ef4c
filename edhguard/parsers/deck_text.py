"""
Parser for plain-text deck lists.

Format:
    <quantity> <card name>
    <card name>              (quantity 1)

Example:
    1 Sol Ring
    4x Lightning Bolt
    Forest
    4 Monastery Swiftspear (BRO) 144

Blank lines, comments (# or //) and section headers are ignored.
"""

import re
from dataclasses import dataclass, field

from edhguard.models.card import normalize_card_name

# Pattern: "4 Lightning Bolt" or "4x Lightning Bolt"
# Groups: (quantity, card_name)
QUANTITY_PATTERN = re.compile(r"^(\d+)x?\s+(.+)$", re.IGNORECASE)

# Arena-style printing suffix: "(BRO) 144" or "(NEO) 290a"
PRINTING_SUFFIX_PATTERN = re.compile(r"\s+\([A-Za-z0-9]+\)\s+\S+$")

COMMENT_PREFIXES = ("#", "//")

# Section headers in exported deck lists
SECTION_HEADERS = frozenset({"deck", "sideboard", "commander", "companion"})


@dataclass
class DeckList:
    """
    Aggregated deck contents.

    Attributes:
        counts: Normalized (case-folded) card name -> number of copies
        total_cards: Sum of all copies
    """

    counts: dict[str, int] = field(default_factory=dict)

    @property
    def total_cards(self) -> int:
        return sum(self.counts.values())

    def add(self, name: str, quantity: int) -> None:
        key = normalize_card_name(name)
        self.counts[key] = self.counts.get(key, 0) + quantity


def parse_deck_line(line: str) -> tuple[str, int] | None:
    """
    Parse one deck line into (card name, quantity).

    Returns None for blank lines, comments, section headers and
    zero-quantity entries.
    """
    line = line.strip()

    if not line or line.startswith(COMMENT_PREFIXES):
        return None

    if line.lower() in SECTION_HEADERS:
        return None

    quantity = 1
    name = line
    match = QUANTITY_PATTERN.match(line)
    if match:
        quantity = int(match.group(1))
        name = match.group(2)

    name = PRINTING_SUFFIX_PATTERN.sub("", name).strip()
    if not name or quantity <= 0:
        return None

    return name, quantity


def parse_deck_text(text: str) -> DeckList:
    """
    Parse deck list text into per-card counts.

    Repeated lines for the same card (in any letter case) add up.

    Args:
        text: Raw deck list text

    Returns:
        DeckList with case-folded names. Empty if input is empty/whitespace.
    """
    deck = DeckList()
    if not text or not text.strip():
        return deck

    for line in text.splitlines():
        parsed = parse_deck_line(line)
        if parsed is None:
            continue
        name, quantity = parsed
        deck.add(name, quantity)

    return deck
