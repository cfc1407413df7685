"""
Core services for the application.

This package contains the derived-state computations, the storage boundary
and the overview queries built on top of them.
"""

from .care_overview import CareOverviewService, FeedingEntry, VaccinationAlert
from .derived_state import PetCareDerivedState
from .record_source import (
    CareRecordSource,
    InMemoryCareRecords,
    RecordNotFoundError,
    Result,
    UnknownPetError,
    configure_logging,
)

__all__ = [
    "CareOverviewService",
    "CareRecordSource",
    "FeedingEntry",
    "InMemoryCareRecords",
    "PetCareDerivedState",
    "RecordNotFoundError",
    "Result",
    "UnknownPetError",
    "VaccinationAlert",
    "configure_logging",
]
