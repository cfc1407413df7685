"""
Domain models for pet-care tracking.

These models represent the records handed over by the storage layer and the
read-only projections computed from them. They use Pydantic for validation
and are frozen: derived state is always computed fresh, never written back.
"""

from collections.abc import Iterable
from datetime import UTC, date, datetime, time, timedelta
from enum import Enum
from uuid import UUID, uuid4

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, computed_field, field_validator

WEEKDAY_RANGE = range(1, 8)  # 1 = Sunday .. 7 = Saturday
ALL_WEEKDAYS = frozenset(WEEKDAY_RANGE)


class PetSpecies(str, Enum):
    """Species categories a pet profile can belong to."""

    DOG = "dog"
    CAT = "cat"
    BIRD = "bird"
    FISH = "fish"
    OTHER = "other"


class AppointmentType(str, Enum):
    VET = "vet"
    GROOMING = "grooming"
    OTHER = "other"


class VaccinationStatus(str, Enum):
    """Vaccination states, listed in classification priority order."""

    EXPIRED = "expired"
    NEAR_EXPIRY = "near_expiry"
    DUE_SOON = "due_soon"
    VALID = "valid"
    UNKNOWN = "unknown"


class AppointmentStatus(str, Enum):
    COMPLETED = "completed"
    TODAY = "today"
    PAST = "past"
    UPCOMING = "upcoming"


class HealthStatus(str, Enum):
    GOOD = "good"
    WARNING = "warning"
    ALERT = "alert"
    UNKNOWN = "unknown"


class MealStatus(str, Enum):
    UPCOMING = "upcoming"
    SOON = "soon"
    PAST = "past"
    INACTIVE = "inactive"


def parse_weekdays(value: str | int | Iterable[object] | None) -> frozenset[int]:
    """
    Normalize an active weekday set.

    Accepts the comma-separated storage encoding ("1,2,7"), a single day
    number, or any iterable of numbers. Items that are not integers in 1..7
    are dropped; any other value yields an empty set.
    """
    items: Iterable[object]
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, int | float):
        items = [value]
    elif isinstance(value, Iterable):
        items = value
    else:
        return frozenset()

    weekdays: set[int] = set()
    for item in items:
        if isinstance(item, bool) or (isinstance(item, float) and not item.is_integer()):
            continue
        try:
            day = int(item)  # type: ignore[call-overload]
        except (TypeError, ValueError):
            continue
        if day in WEEKDAY_RANGE:
            weekdays.add(day)
    return frozenset(weekdays)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class CareRecord(BaseModel):
    """Fields every stored record carries."""

    model_config = ConfigDict(frozen=True)  # Derived state must never mutate records

    id: UUID = Field(default_factory=uuid4)
    created_at: AwareDatetime = Field(default_factory=_utcnow)
    updated_at: AwareDatetime = Field(default_factory=_utcnow)


class Pet(CareRecord):
    """A pet profile."""

    name: str = Field(min_length=1)
    species: PetSpecies = PetSpecies.OTHER
    breed: str | None = None
    birthdate: date | None = None
    gender: str | None = None
    weight_kg: float | None = Field(None, ge=0.0, description="Current weight")
    notes: str | None = None

    @field_validator("species", mode="before")
    @classmethod
    def normalize_species(cls, v: object) -> PetSpecies:
        if isinstance(v, PetSpecies):
            return v
        value = str(v or "").strip().lower()
        return PetSpecies(value) if value in {s.value for s in PetSpecies} else PetSpecies.OTHER

    @field_validator("birthdate", mode="before")
    @classmethod
    def birthdate_as_date(cls, v: object) -> object:
        if isinstance(v, datetime):
            return v.date()
        return v


class PetRecord(CareRecord):
    """A record owned by a pet."""

    pet_id: UUID


class HealthRecord(PetRecord):
    date: AwareDatetime
    weight_kg: float | None = Field(None, ge=0.0)
    temperature_c: float | None = Field(None, description="Body temperature in Celsius")
    symptoms: str | None = None
    medications: str | None = None
    notes: str | None = None

    @property
    def has_symptoms(self) -> bool:
        return bool(self.symptoms)

    @property
    def has_medications(self) -> bool:
        return bool(self.medications)


class Vaccination(PetRecord):
    name: str
    date: AwareDatetime = Field(description="Administration date")
    expiry_date: AwareDatetime | None = None
    next_due_date: AwareDatetime | None = None
    vet_name: str | None = None
    clinic_name: str | None = None
    notes: str | None = None


class MealSchedule(PetRecord):
    """A recurring feeding at a fixed time of day on a set of weekdays."""

    name: str
    time_of_day: time
    amount_g: float = Field(default=0.0, ge=0.0)
    food_type: str = ""
    is_active: bool = True
    weekdays: frozenset[int] = Field(
        default=ALL_WEEKDAYS, description="Active weekdays, 1 = Sunday .. 7 = Saturday"
    )
    notes: str | None = None

    @field_validator("weekdays", mode="before")
    @classmethod
    def drop_invalid_weekdays(cls, v: object) -> frozenset[int]:
        return parse_weekdays(v)  # type: ignore[arg-type]


class Appointment(PetRecord):
    title: str
    type: AppointmentType = AppointmentType.OTHER
    date: AwareDatetime
    time_of_day: time | None = None
    duration_minutes: int | None = Field(None, ge=0)
    location: str | None = None
    notes: str | None = None
    is_done: bool = False
    reminder_minutes: int | None = Field(None, ge=0, description="Minutes before to remind")

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v: object) -> AppointmentType:
        if isinstance(v, AppointmentType):
            return v
        value = str(v or "").strip().lower()
        return (
            AppointmentType(value)
            if value in {t.value for t in AppointmentType}
            else AppointmentType.OTHER
        )

    @property
    def scheduled_at(self) -> datetime:
        """The appointment date combined with its time of day, when one is set."""
        if self.time_of_day is None:
            return self.date
        return datetime.combine(
            self.date.date(), self.time_of_day.replace(tzinfo=None), tzinfo=self.date.tzinfo
        )

    @property
    def end_time(self) -> datetime | None:
        if self.duration_minutes is None:
            return None
        return self.scheduled_at + timedelta(minutes=self.duration_minutes)


class PetAge(BaseModel):
    """Elapsed full years and remaining months since a birthdate."""

    model_config = ConfigDict(frozen=True)

    years: int = Field(ge=0)
    months: int = Field(ge=0, le=11)

    @computed_field(return_type=str)
    def text(self) -> str:
        if self.years == 0:
            return f"{self.months} months"
        return f"{self.years} years {self.months} months"


class VaccinationAssessment(BaseModel):
    """Vaccination status with its display description and day counts."""

    model_config = ConfigDict(frozen=True)

    status: VaccinationStatus
    description: str
    days_until_expiry: int | None = None
    days_until_next_due: int | None = None

    # Independent of status: a near-expiry vaccination can also have its next dose near
    is_expired: bool = False
    is_expiry_near: bool = False
    is_next_due_near: bool = False


class FeedingProjection(BaseModel):
    """Next feeding derived from a meal schedule. All fields are None for "none"."""

    model_config = ConfigDict(frozen=True)

    status: MealStatus
    next_feeding_at: datetime | None = None
    minutes_until: int | None = Field(None, ge=0)
    time_until_text: str | None = None


class PetProfile(BaseModel):
    """Read-only display projection of a pet."""

    model_config = ConfigDict(frozen=True)

    pet_id: UUID
    name: str
    species: PetSpecies
    species_label: str
    breed: str | None = None
    age_text: str
    gender_text: str
    weight_text: str
