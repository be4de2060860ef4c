"""
Bulk card importer.

Populates the card catalog from a JSON card dump (a JSON array of card
objects, or JSON lines). Small files are decoded in one go; large files are
parsed incrementally with ijson so memory use does not grow with file size.

The importer pulls one record at a time from the source and only asks for the
next one after the current record has been classified and, when its batch is
full, written. At most one batch of records is held in memory at any time.
"""

import gc
import json
import logging
from collections import Counter
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import ijson
from pydantic import ValidationError
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from edhguard.config import (
    GC_INTERVAL,
    IMPORT_BATCH_SIZE,
    PROGRESS_INTERVAL,
    STREAMING_THRESHOLD_BYTES,
)
from edhguard.db.catalog import CatalogStore
from edhguard.db.errors import CatalogError, InvalidRecordError
from edhguard.models.card import CardRecord
from edhguard.parsers.scryfall import card_record_from_scryfall, is_playable_type_line

logger = logging.getLogger(__name__)


class ImportStrategy(str, Enum):
    """How the source file is read."""

    LOAD_ALL = "load_all"
    STREAMING = "streaming"


class SourceLayout(str, Enum):
    """Top-level shape of a source file."""

    ARRAY = "array"
    JSON_LINES = "json_lines"


class SkipReason(str, Enum):
    """Why a source record was not imported."""

    NOT_AN_OBJECT = "not_an_object"
    MISSING_REQUIRED_FIELDS = "missing_required_fields"
    NOT_PLAYABLE = "not_playable"
    CONVERSION_FAILED = "conversion_failed"
    WRITE_FAILED = "write_failed"


@dataclass
class ImportResult:
    """
    Counters for one import run.

    Attributes:
        strategy: How the source was read
        imported: Records written to the catalog (duplicates count each time)
        skipped: Records filtered out or failed
        skip_reasons: Breakdown of skipped records
    """

    strategy: ImportStrategy
    imported: int = 0
    skipped: int = 0
    skip_reasons: Counter[SkipReason] = field(default_factory=Counter)

    @property
    def processed(self) -> int:
        return self.imported + self.skipped

    def record_skip(self, reason: SkipReason) -> None:
        self.skipped += 1
        self.skip_reasons[reason] += 1


class CardImportError(Exception):
    """Base class for fatal import failures."""

    pass


class SourceNotFoundError(CardImportError):
    """Raised when the source path is not a readable file."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Card source not found: {path}")


class MalformedSourceError(CardImportError):
    """
    Raised when the source is not a JSON array (or JSON lines) of cards.

    When raised part-way through an import, ``result`` holds the counts
    of everything written before the failure.
    """

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        self.result: ImportResult | None = None
        super().__init__(f"Malformed card source {path}: {reason}")


@dataclass(frozen=True, slots=True)
class RecordOutcome:
    """Result of filtering and converting one source record."""

    record: CardRecord | None
    skip_reason: SkipReason | None = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.skip_reason is None

    @classmethod
    def accepted(cls, record: CardRecord) -> "RecordOutcome":
        return cls(record=record)

    @classmethod
    def skipped(cls, reason: SkipReason, detail: str = "") -> "RecordOutcome":
        return cls(record=None, skip_reason=reason, detail=detail)


def _has_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def classify_record(raw: Any) -> RecordOutcome:
    """
    Decide whether a raw source record belongs in the catalog.

    Records without a name or type line are skipped, as are tokens,
    art cards and emblems. Records that fail validation are skipped
    with CONVERSION_FAILED.
    """
    if not isinstance(raw, dict):
        return RecordOutcome.skipped(SkipReason.NOT_AN_OBJECT, type(raw).__name__)

    name = raw.get("name")
    type_line = raw.get("type_line")
    if not _has_text(name) or not _has_text(type_line):
        return RecordOutcome.skipped(
            SkipReason.MISSING_REQUIRED_FIELDS, str(name) if name else "<unnamed>"
        )

    if not is_playable_type_line(type_line):
        return RecordOutcome.skipped(SkipReason.NOT_PLAYABLE, f"{name} ({type_line})")

    try:
        record = card_record_from_scryfall(raw)
    except ValidationError as e:
        return RecordOutcome.skipped(SkipReason.CONVERSION_FAILED, f"{name}: {e}")

    return RecordOutcome.accepted(record)


def choose_strategy(
    path: Path,
    threshold_bytes: int = STREAMING_THRESHOLD_BYTES,
) -> ImportStrategy:
    """Stream files at or above the threshold; load smaller files whole."""
    if path.stat().st_size >= threshold_bytes:
        return ImportStrategy.STREAMING
    return ImportStrategy.LOAD_ALL


def sniff_source_layout(path: Path) -> SourceLayout:
    """
    Detect whether a source holds a JSON array or JSON lines.

    Raises:
        MalformedSourceError: If the file is empty or starts with anything else
    """
    with open(path, "rb") as f:
        while chunk := f.read(4096):
            stripped = chunk.lstrip()
            if not stripped:
                continue
            first = stripped[:1]
            if first == b"[":
                return SourceLayout.ARRAY
            if first == b"{":
                return SourceLayout.JSON_LINES
            raise MalformedSourceError(path, f"expected a JSON array or objects, found {first!r}")

    raise MalformedSourceError(path, "source is empty")


def iter_source_streaming(path: Path) -> Iterator[Any]:
    """
    Yield source records one at a time without decoding the whole file.

    Numbers are decoded as floats rather than Decimals.

    Raises:
        MalformedSourceError: On invalid JSON, possibly after some records
    """
    layout = sniff_source_layout(path)

    with open(path, "rb") as f:
        if layout is SourceLayout.ARRAY:
            items = ijson.items(f, "item", use_float=True)
        else:
            items = ijson.items(f, "", multiple_values=True, use_float=True)

        try:
            yield from items
        except ijson.JSONError as e:
            raise MalformedSourceError(path, str(e)) from e


def _decode_concatenated(text: str) -> list[Any]:
    decoder = json.JSONDecoder()
    values: list[Any] = []
    index = 0
    length = len(text)
    while True:
        while index < length and text[index].isspace():
            index += 1
        if index >= length:
            return values
        value, index = decoder.raw_decode(text, index)
        values.append(value)


def load_source(path: Path) -> list[Any]:
    """
    Decode a whole source file into a list of records.

    Raises:
        MalformedSourceError: If the file is not valid JSON of the right shape
    """
    layout = sniff_source_layout(path)

    try:
        with open(path, encoding="utf-8") as f:
            if layout is SourceLayout.ARRAY:
                data = json.load(f)
            else:
                data = _decode_concatenated(f.read())
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedSourceError(path, str(e)) from e

    if not isinstance(data, list):
        raise MalformedSourceError(path, "top-level value is not an array")

    return data


class CardImporter:
    """
    Imports a card source into a CatalogStore.

    The store must already be connected; the importer initializes the
    schema before reading the source. The most recent run's counters are
    kept on ``result`` so callers can report them even when a run fails.
    """

    def __init__(
        self,
        store: CatalogStore,
        *,
        batch_size: int = IMPORT_BATCH_SIZE,
        progress_interval: int = PROGRESS_INTERVAL,
        gc_interval: int = GC_INTERVAL,
        streaming_threshold: int = STREAMING_THRESHOLD_BYTES,
    ):
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")
        self.store = store
        self.batch_size = batch_size
        self.progress_interval = progress_interval
        self.gc_interval = gc_interval
        self.streaming_threshold = streaming_threshold
        self.result: ImportResult | None = None

    async def run(self, source: Path | str) -> ImportResult:
        """
        Import every playable card from the source.

        Args:
            source: Path to a JSON array or JSON-lines card file

        Returns:
            Imported/skipped counters for this run

        Raises:
            SourceNotFoundError: If the source is not a file
            MalformedSourceError: If the source cannot be parsed
            CatalogError: If the catalog is unavailable or closed
            OperationalError: If the catalog cannot be written (disk, locking)
        """
        path = Path(source)
        if not path.is_file():
            raise SourceNotFoundError(path)

        await self.store.initialize_schema()

        strategy = choose_strategy(path, self.streaming_threshold)
        size_mb = path.stat().st_size / (1024 * 1024)
        logger.info("Importing cards from %s (%.1f MB, %s)", path, size_mb, strategy.value)

        result = ImportResult(strategy=strategy)
        self.result = result
        pending: list[CardRecord] = []

        try:
            records: Iterable[Any]
            if strategy is ImportStrategy.STREAMING:
                records = iter_source_streaming(path)
            else:
                records = load_source(path)
                logger.info("Found %d records to import", len(records))

            seen = 0
            for raw in records:
                seen += 1
                outcome = classify_record(raw)

                if outcome.skip_reason is not None:
                    self._skip(outcome.skip_reason, outcome.detail, result)
                elif outcome.record is not None:
                    pending.append(outcome.record)
                    if len(pending) >= self.batch_size:
                        await self._flush(pending, result)
                        pending = []

                if seen % self.progress_interval == 0:
                    logger.info(
                        "Processed %d records (%d imported, %d skipped)",
                        seen,
                        result.imported,
                        result.skipped,
                    )

                if strategy is ImportStrategy.STREAMING and seen % self.gc_interval == 0:
                    gc.collect()

            await self._flush(pending, result)

        except MalformedSourceError as e:
            await self._flush(pending, result)
            e.result = result
            logger.error(
                "Import aborted: %s (%d imported, %d skipped)",
                e.reason,
                result.imported,
                result.skipped,
            )
            raise

        except (OperationalError, CatalogError):
            logger.error(
                "Import aborted: catalog unavailable (%d imported, %d skipped)",
                result.imported,
                result.skipped,
            )
            raise

        logger.info("Import complete: %d imported, %d skipped", result.imported, result.skipped)
        return result

    def _skip(self, reason: SkipReason, detail: str, result: ImportResult) -> None:
        result.record_skip(reason)
        if reason is SkipReason.CONVERSION_FAILED:
            logger.warning("Failed to import card %s", detail)
        else:
            logger.debug("Skipped record (%s): %s", reason.value, detail)

    async def _flush(self, batch: list[CardRecord], result: ImportResult) -> None:
        if not batch:
            return

        try:
            await self.store.upsert_batch(batch)
        except OperationalError:
            # Store-level failures abort the import
            raise
        except (SQLAlchemyError, InvalidRecordError) as e:
            logger.warning("Batch of %d cards failed (%s); retrying one at a time", len(batch), e)
            await self._write_individually(batch, result)
        else:
            result.imported += len(batch)

    async def _write_individually(self, batch: list[CardRecord], result: ImportResult) -> None:
        for record in batch:
            try:
                await self.store.upsert(record)
            except OperationalError:
                raise
            except (SQLAlchemyError, InvalidRecordError) as e:
                logger.warning("Failed to import card %r: %s", record.name, e)
                result.record_skip(SkipReason.WRITE_FAILED)
            else:
                result.imported += 1


async def import_cards(
    source: Path | str,
    store: CatalogStore,
    **options: Any,
) -> ImportResult:
    """
    Convenience wrapper: import a card source into a connected store.

    Keyword options are passed to CardImporter.
    """
    importer = CardImporter(store, **options)
    return await importer.run(source)
