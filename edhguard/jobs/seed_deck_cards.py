"""
Add placeholder catalog entries for every card in a deck file.

Lets deck validation run without a full card import.

Usage:
    python -m edhguard.jobs.seed_deck_cards decks/minthara.txt
"""

import argparse
import asyncio
import logging
from pathlib import Path

from edhguard.config import settings
from edhguard.db.catalog import CatalogStore
from edhguard.db.errors import CatalogError
from edhguard.parsers.deck_text import parse_deck_text
from edhguard.services.deck_seeding import SeedResult, seed_deck_cards

logger = logging.getLogger(__name__)


async def run_seed(deck_text: str, catalog_path: Path | None = None) -> tuple[SeedResult, int]:
    """
    Seed placeholder cards for a deck list.

    Returns:
        Tuple of (seed result, total cards in catalog afterwards)
    """
    deck = parse_deck_text(deck_text)
    logger.info("Found %d unique cards in deck", len(deck.counts))

    async with CatalogStore(catalog_path) as store:
        result = await seed_deck_cards(store, deck.counts)
        total = await store.count()

    return result, total


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for seeding deck cards."""
    parser = argparse.ArgumentParser(
        description="Add placeholder card data for every card in a deck file"
    )
    parser.add_argument("deck", type=Path, help="Path to a deck list file")
    parser.add_argument(
        "--catalog",
        type=Path,
        default=settings.catalog_path,
        help=f"Catalog file (default: {settings.catalog_path})",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if not args.deck.is_file():
        print(f"Error: Deck file not found: {args.deck}")
        raise SystemExit(1)

    deck_text = args.deck.read_text(encoding="utf-8")

    try:
        result, total = asyncio.run(run_seed(deck_text, args.catalog))
    except CatalogError as e:
        print(f"Error: {e}")
        raise SystemExit(1) from e

    print("Deck cards added!")
    print(f"   Added: {len(result.added)} cards")
    print(f"   Skipped (already existed): {len(result.existing)} cards")
    if result.failed:
        print(f"   Failed: {len(result.failed)} cards")
    print(f"   Total in database: {total} cards")


if __name__ == "__main__":
    main()
