"""
Validate a Commander deck file against the local card catalog.

Rules checked:
    - Exactly 100 cards
    - Singleton (basic lands and a few named cards excepted)
    - Commander present (legendary creature/planeswalker; uncommon creature for PDH)
    - No card banned in the format

Usage:
    python -m edhguard.jobs.validate_deck my-deck.txt
    python -m edhguard.jobs.validate_deck --pauper my-pauper-deck.txt
"""

import argparse
import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path

from edhguard.config import settings
from edhguard.db.catalog import CatalogStore
from edhguard.db.errors import CatalogError, EmptyCatalogError
from edhguard.models.card import CardRecord
from edhguard.models.format_rules import FormatRules, FormatVariant, get_format_rules
from edhguard.models.violation import Severity, ValidationResult
from edhguard.parsers.deck_text import parse_deck_text
from edhguard.services.deck_validator import (
    CachedCardLookup,
    find_commander_candidates,
    validate_deck,
)

logger = logging.getLogger(__name__)


@dataclass
class DeckReport:
    """Validation result plus the deck's possible commanders."""

    result: ValidationResult
    format_rules: FormatRules
    commanders: list[CardRecord] = field(default_factory=list)


async def run_validation(
    deck_text: str,
    catalog_path: Path | None = None,
    format_rules: FormatRules | None = None,
) -> DeckReport:
    """
    Parse a deck list and validate it against the catalog.

    Raises:
        StoreUnavailableError: If the catalog cannot be opened
        EmptyCatalogError: If the catalog holds no cards
    """
    rules = format_rules or get_format_rules(settings.default_format)
    deck = parse_deck_text(deck_text)

    path = catalog_path or settings.catalog_path
    # Validation never creates a catalog
    if not path.exists():
        raise EmptyCatalogError(str(path))

    async with CatalogStore(path) as store:
        result = await validate_deck(deck.counts, store, rules)
        commanders = await find_commander_candidates(deck.counts, CachedCardLookup(store), rules)

    return DeckReport(result=result, format_rules=rules, commanders=commanders)


def format_report(report: DeckReport) -> str:
    """Render a report for the terminal."""
    result = report.result
    lines = [
        f"=== {report.format_rules.display_name} Deck Validation Results ===",
        f"Total Cards: {result.total_cards}",
        f"Valid: {'yes' if result.is_valid else 'no'}",
    ]

    if result.violations:
        lines.append("")
        lines.append("Violations Found:")
        for violation in result.violations:
            label = "ERROR" if violation.severity is Severity.ERROR else "WARNING"
            lines.append(f"{label} [{violation.rule_name}] {violation.message}")
            if violation.affected_cards:
                lines.append(f"   Affected cards: {', '.join(violation.affected_cards)}")
    else:
        lines.append("")
        lines.append("No violations found. Deck is valid!")

    if report.commanders:
        lines.append("")
        lines.append("=== Commander Analysis ===")
        lines.append("Potential Commanders:")
        for commander in report.commanders:
            colors = "".join(commander.color_identity) or "Colorless"
            lines.append(f"  - {commander.name} ({colors})")

    lines.append("")
    lines.append("=== Card Summary ===")
    for card_name, count in sorted(result.card_counts.items()):
        lines.append(f"{count}x {card_name}")

    return "\n".join(lines)


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for deck validation."""
    parser = argparse.ArgumentParser(
        description="Validate a Commander deck file against the local card catalog"
    )
    parser.add_argument("deck", type=Path, help="Path to a text file containing the deck list")
    parser.add_argument(
        "--catalog",
        type=Path,
        default=settings.catalog_path,
        help=f"Catalog file (default: {settings.catalog_path})",
    )
    variant = parser.add_mutually_exclusive_group()
    variant.add_argument(
        "--pauper",
        action="store_true",
        help="Validate as Pauper Commander (PDH)",
    )
    variant.add_argument(
        "--format",
        dest="variant",
        choices=[v.value for v in FormatVariant],
        default=settings.default_format,
        help=f"Format variant (default: {settings.default_format})",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    deck_path = args.deck.resolve()
    if not deck_path.exists():
        print(f"Error: File not found: {deck_path}")
        raise SystemExit(1)
    if not deck_path.is_file():
        print(f"Error: Path is not a file: {deck_path}")
        raise SystemExit(1)

    deck_text = deck_path.read_text(encoding="utf-8")
    if not deck_text.strip():
        print("Error: Deck file is empty.")
        raise SystemExit(1)

    variant_name = FormatVariant.PAUPER_COMMANDER if args.pauper else args.variant
    rules = get_format_rules(variant_name)

    try:
        report = asyncio.run(run_validation(deck_text, args.catalog, rules))
    except CatalogError as e:
        print(f"Error: {e}")
        raise SystemExit(1) from e

    print(format_report(report))
    if not report.result.is_valid:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
