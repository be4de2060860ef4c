from edhguard.db.catalog import CatalogStore, record_to_row, row_to_record
from edhguard.db.errors import (
    CatalogError,
    EmptyCatalogError,
    InvalidRecordError,
    StoreClosedError,
    StoreUnavailableError,
)

__all__ = [
    "CatalogError",
    "CatalogStore",
    "EmptyCatalogError",
    "InvalidRecordError",
    "StoreClosedError",
    "StoreUnavailableError",
    "record_to_row",
    "row_to_record",
]
