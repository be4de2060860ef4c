from edhguard.parsers.deck_text import DeckList, parse_deck_line, parse_deck_text
from edhguard.parsers.scryfall import (
    NON_PLAYABLE_MARKERS,
    ScryfallCard,
    ScryfallFace,
    card_record_from_scryfall,
    is_playable_type_line,
)

__all__ = [
    "DeckList",
    "NON_PLAYABLE_MARKERS",
    "ScryfallCard",
    "ScryfallFace",
    "card_record_from_scryfall",
    "is_playable_type_line",
    "parse_deck_line",
    "parse_deck_text",
]
