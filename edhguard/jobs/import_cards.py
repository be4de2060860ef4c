"""
Import a card dump into the local catalog.

Usage:
    python -m edhguard.jobs.import_cards data/oracle-cards.json
    python -m edhguard.jobs.import_cards --reset --catalog data/cards.db data/all-cards.json
"""

import argparse
import asyncio
import logging
from pathlib import Path

from sqlalchemy.exc import OperationalError

from edhguard.config import IMPORT_BATCH_SIZE, settings
from edhguard.db.catalog import CatalogStore
from edhguard.db.errors import CatalogError
from edhguard.services.card_importer import (
    CardImporter,
    CardImportError,
    ImportResult,
    MalformedSourceError,
)

logger = logging.getLogger(__name__)


async def run_import(
    source: Path,
    catalog_path: Path | None = None,
    *,
    reset: bool = False,
    batch_size: int = IMPORT_BATCH_SIZE,
) -> ImportResult:
    """
    Open the catalog, import the source and close the catalog.

    Args:
        source: JSON array or JSON-lines card file
        catalog_path: Catalog file. Defaults to settings.catalog_path
        reset: Drop all existing cards before importing
        batch_size: Records written per transaction

    Returns:
        Counters for the run
    """
    async with CatalogStore(catalog_path) as store:
        if reset:
            await store.reset_all()

        importer = CardImporter(store, batch_size=batch_size)
        try:
            result = await importer.run(source)
        except OperationalError:
            if importer.result is not None:
                print("Import stopped by a catalog error after:")
                _print_counts(importer.result)
            raise
        logger.info("Catalog now holds %d cards", await store.count())
        return result


def _print_counts(result: ImportResult) -> None:
    print(f"   Imported: {result.imported} cards")
    print(f"   Skipped: {result.skipped} cards")
    for reason, count in sorted(result.skip_reasons.items()):
        print(f"     {reason.value}: {count}")


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for importing card data."""
    parser = argparse.ArgumentParser(
        description="Import card data from a JSON file into the local card catalog"
    )
    parser.add_argument(
        "source",
        type=Path,
        help="Path to a JSON array or JSON-lines card file",
    )
    parser.add_argument(
        "--catalog",
        type=Path,
        default=settings.catalog_path,
        help=f"Catalog file (default: {settings.catalog_path})",
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Remove every card from the catalog before importing",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=IMPORT_BATCH_SIZE,
        help=f"Cards written per transaction (default: {IMPORT_BATCH_SIZE})",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    source = args.source.resolve()
    try:
        result = asyncio.run(
            run_import(source, args.catalog, reset=args.reset, batch_size=args.batch_size)
        )
    except MalformedSourceError as e:
        print(f"Import failed: {e}")
        if e.result is not None:
            _print_counts(e.result)
        raise SystemExit(1) from e
    except (CardImportError, CatalogError) as e:
        print(f"Import failed: {e}")
        raise SystemExit(1) from e
    except OperationalError as e:
        print(f"Import failed: catalog error: {e.orig}")
        raise SystemExit(1) from e

    print("Import complete!")
    _print_counts(result)


if __name__ == "__main__":
    main()
