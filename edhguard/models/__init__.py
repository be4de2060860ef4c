from edhguard.models.card import (
    LEGALITY_VALUES,
    CardFace,
    CardRecord,
    LegalityStatus,
    normalize_card_name,
)
from edhguard.models.format_rules import (
    PAUPER_COMMANDER_RULES,
    STANDARD_COMMANDER_RULES,
    FormatRules,
    FormatVariant,
    get_format_rules,
)
from edhguard.models.violation import Severity, ValidationResult, Violation

__all__ = [
    "CardFace",
    "CardRecord",
    "FormatRules",
    "FormatVariant",
    "LEGALITY_VALUES",
    "LegalityStatus",
    "PAUPER_COMMANDER_RULES",
    "STANDARD_COMMANDER_RULES",
    "Severity",
    "ValidationResult",
    "Violation",
    "get_format_rules",
    "normalize_card_name",
]
