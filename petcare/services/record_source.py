"""
Storage boundary for pet-care records.

Key patterns:
- Protocol-based boundary: any storage layer exposing the fetch methods works
- Generic Result type for expected failures at the boundary
- Structured logging configured once, bound per component
- An in-memory record store that enforces pet references
"""

import logging
from datetime import UTC, datetime
from typing import Any, Generic, Protocol, TypeVar
from uuid import UUID

import structlog

from petcare.config import LoggingConfig
from petcare.domain.models import (
    Appointment,
    HealthRecord,
    MealSchedule,
    Pet,
    PetRecord,
    Vaccination,
)

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
]

# Configure structured logging
structlog.configure(
    processors=[*_SHARED_PROCESSORS, structlog.processors.JSONRenderer()],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)


def configure_logging(config: LoggingConfig) -> None:
    """Apply the configured level and renderer (JSON or console)."""
    renderer: structlog.types.Processor = (
        structlog.dev.ConsoleRenderer()
        if config.format == "console"
        else structlog.processors.JSONRenderer()
    )
    logging.basicConfig(format="%(message)s", level=config.level)
    logging.getLogger().setLevel(config.level)
    structlog.configure(processors=[*_SHARED_PROCESSORS, renderer])


# Generic Result type for explicit error handling
ValueT = TypeVar("ValueT")
ErrorT = TypeVar("ErrorT", bound=BaseException)


class Result(Generic[ValueT, ErrorT]):
    """
    Explicit error handling without exceptions for expected failures.

    Used at the storage boundary: a source that cannot load one kind of record
    returns an error and the caller decides how to degrade.
    """

    def __init__(self, value: ValueT | None = None, error: ErrorT | None = None) -> None:
        if value is not None and error is not None:
            raise ValueError("Result cannot have both value and error")
        if value is None and error is None:
            raise ValueError("Result must have either value or error")
        self._value: ValueT | None = value
        self._error: ErrorT | None = error

    @classmethod
    def ok(cls, value: ValueT) -> "Result[ValueT, ErrorT]":
        return cls(value=value)

    @classmethod
    def err(cls, error: ErrorT) -> "Result[ValueT, ErrorT]":
        return cls(error=error)

    def is_ok(self) -> bool:
        return self._error is None

    def is_err(self) -> bool:
        return self._error is not None

    def unwrap(self) -> ValueT:
        if self._error is not None:
            raise self._error
        return self._value  # type: ignore

    def unwrap_or(self, default: ValueT) -> ValueT:
        return self._value if self._error is None else default  # type: ignore

    def unwrap_err(self) -> ErrorT:
        if self._error is None:
            raise ValueError("Called unwrap_err() on an Ok value")
        return self._error


class RecordNotFoundError(KeyError):
    """Raised when an id does not match any stored record."""


class UnknownPetError(RecordNotFoundError):
    """Raised when a record references a pet the store does not hold."""


class CareRecordSource(Protocol):
    """
    Protocol for loading stored records.

    ``pet_id=None`` means records of every pet.
    """

    def fetch_pets(self) -> Result[list[Pet], Exception]: ...

    def fetch_health_records(
        self, pet_id: UUID | None = None
    ) -> Result[list[HealthRecord], Exception]: ...

    def fetch_vaccinations(
        self, pet_id: UUID | None = None
    ) -> Result[list[Vaccination], Exception]: ...

    def fetch_meal_schedules(
        self, pet_id: UUID | None = None
    ) -> Result[list[MealSchedule], Exception]: ...

    def fetch_appointments(
        self, pet_id: UUID | None = None
    ) -> Result[list[Appointment], Exception]: ...


RecordT = TypeVar("RecordT", bound=PetRecord)


class InMemoryCareRecords:
    """
    Record store held in memory.

    Used for sample data and tests. Records referencing an unknown pet are
    rejected, and deleting a pet deletes its records.
    """

    def __init__(self) -> None:
        self._pets: dict[UUID, Pet] = {}
        self._health_records: dict[UUID, HealthRecord] = {}
        self._vaccinations: dict[UUID, Vaccination] = {}
        self._meal_schedules: dict[UUID, MealSchedule] = {}
        self._appointments: dict[UUID, Appointment] = {}
        self.logger = logger.bind(component="in_memory_care_records")

    def _tables(self) -> list[dict[UUID, Any]]:
        return [self._health_records, self._vaccinations, self._meal_schedules, self._appointments]

    def _add_record(self, table: dict[UUID, RecordT], record: RecordT) -> RecordT:
        if record.pet_id not in self._pets:
            raise UnknownPetError(f"No pet with id {record.pet_id}")
        table[record.id] = record
        self.logger.debug(
            "record_added", record_type=type(record).__name__, pet_id=str(record.pet_id)
        )
        return record

    def add_pet(self, pet: Pet) -> Pet:
        self._pets[pet.id] = pet
        self.logger.debug("pet_added", pet_id=str(pet.id), species=pet.species.value)
        return pet

    def add_health_record(self, record: HealthRecord) -> HealthRecord:
        return self._add_record(self._health_records, record)

    def add_vaccination(self, vaccination: Vaccination) -> Vaccination:
        return self._add_record(self._vaccinations, vaccination)

    def add_meal_schedule(self, schedule: MealSchedule) -> MealSchedule:
        return self._add_record(self._meal_schedules, schedule)

    def add_appointment(self, appointment: Appointment) -> Appointment:
        return self._add_record(self._appointments, appointment)

    def update_pet_weight(self, pet_id: UUID, weight_kg: float) -> Pet:
        """Replace the pet's current weight. Records are frozen, so a copy is stored."""
        pet = self._pets.get(pet_id)
        if pet is None:
            raise UnknownPetError(f"No pet with id {pet_id}")
        updated = Pet.model_validate(
            {**pet.model_dump(), "weight_kg": weight_kg, "updated_at": datetime.now(UTC)}
        )
        self._pets[pet_id] = updated
        return updated

    def delete_pet(self, pet_id: UUID) -> None:
        if self._pets.pop(pet_id, None) is None:
            raise UnknownPetError(f"No pet with id {pet_id}")

        removed = 0
        for table in self._tables():
            owned = [record_id for record_id, record in table.items() if record.pet_id == pet_id]
            for record_id in owned:
                del table[record_id]
            removed += len(owned)
        self.logger.info("pet_deleted", pet_id=str(pet_id), cascaded_records=removed)

    def delete_record(self, record_id: UUID) -> None:
        for table in self._tables():
            if table.pop(record_id, None) is not None:
                return
        raise RecordNotFoundError(f"No record with id {record_id}")

    def fetch_pets(self) -> Result[list[Pet], Exception]:
        return Result.ok(list(self._pets.values()))

    def fetch_health_records(
        self, pet_id: UUID | None = None
    ) -> Result[list[HealthRecord], Exception]:
        return Result.ok(_owned_by(self._health_records, pet_id))

    def fetch_vaccinations(
        self, pet_id: UUID | None = None
    ) -> Result[list[Vaccination], Exception]:
        return Result.ok(_owned_by(self._vaccinations, pet_id))

    def fetch_meal_schedules(
        self, pet_id: UUID | None = None
    ) -> Result[list[MealSchedule], Exception]:
        return Result.ok(_owned_by(self._meal_schedules, pet_id))

    def fetch_appointments(
        self, pet_id: UUID | None = None
    ) -> Result[list[Appointment], Exception]:
        return Result.ok(_owned_by(self._appointments, pet_id))


def _owned_by(table: dict[UUID, RecordT], pet_id: UUID | None) -> list[RecordT]:
    return [record for record in table.values() if pet_id is None or record.pet_id == pet_id]
