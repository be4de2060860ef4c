from dataclasses import dataclass, field
from enum import Enum


class Severity(str, Enum):
    """How a rule violation affects deck validity."""

    # Deck is invalid
    ERROR = "error"

    # Check could not be completed with confidence; deck validity unaffected
    WARNING = "warning"


@dataclass(frozen=True, slots=True)
class Violation:
    """
    A single rule violation found in a deck.

    Attributes:
        rule_id: Stable identifier of the rule (e.g., "singleton")
        rule_name: Human-readable rule name
        message: Explanation suitable for display
        severity: ERROR or WARNING
        affected_cards: Card names the violation refers to, if any
    """

    rule_id: str
    rule_name: str
    message: str
    severity: Severity
    affected_cards: tuple[str, ...] = ()

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR


@dataclass
class ValidationResult:
    """Outcome of evaluating a deck against the rule set."""

    is_valid: bool
    total_cards: int
    violations: list[Violation] = field(default_factory=list)
    card_counts: dict[str, int] = field(default_factory=dict)

    def errors(self) -> list[Violation]:
        """Violations that make the deck invalid."""
        return [v for v in self.violations if v.is_error]

    def warnings(self) -> list[Violation]:
        """Violations that only reduce confidence."""
        return [v for v in self.violations if not v.is_error]
