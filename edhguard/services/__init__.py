from edhguard.services.card_importer import (
    CardImporter,
    CardImportError,
    ImportResult,
    ImportStrategy,
    MalformedSourceError,
    RecordOutcome,
    SkipReason,
    SourceNotFoundError,
    classify_record,
    import_cards,
)
from edhguard.services.deck_seeding import SeedResult, placeholder_record, seed_deck_cards
from edhguard.services.deck_validator import (
    DECK_RULES,
    CachedCardLookup,
    CardLookup,
    DeckRule,
    evaluate_deck,
    find_commander_candidates,
    validate_deck,
)

__all__ = [
    "CachedCardLookup",
    "CardImportError",
    "CardImporter",
    "CardLookup",
    "DECK_RULES",
    "DeckRule",
    "ImportResult",
    "ImportStrategy",
    "MalformedSourceError",
    "RecordOutcome",
    "SeedResult",
    "SkipReason",
    "SourceNotFoundError",
    "classify_record",
    "evaluate_deck",
    "find_commander_candidates",
    "import_cards",
    "placeholder_record",
    "seed_deck_cards",
    "validate_deck",
]
