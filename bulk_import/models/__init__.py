"""Domain models for the spreadsheet bulk import pipeline.

Row models, reference snapshots, batch results, configuration and the
session lifecycle enum used throughout the application.
"""

from .batch_result import BatchResult, ImportReport, RowFailure
from .config_models import CollectionConfig, ContractCodeConfig, DatabaseConfig, ImportConfig
from .reference import ImportContext, ReferenceEntity
from .rows import (
    ContractImportRow,
    ParsedRow,
    ParsedSet,
    PartnerImportRow,
    ProductImportRow,
    RawRow,
)
from .session_state import SessionState

__all__ = [
    # Configuration models
    "CollectionConfig",
    "ContractCodeConfig",
    "DatabaseConfig",
    "ImportConfig",
    # Row models
    "RawRow",
    "ContractImportRow",
    "PartnerImportRow",
    "ProductImportRow",
    "ParsedRow",
    "ParsedSet",
    # Reference snapshot
    "ImportContext",
    "ReferenceEntity",
    # Results
    "BatchResult",
    "ImportReport",
    "RowFailure",
    "SessionState",
]
