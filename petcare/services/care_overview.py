"""
Care overview queries built on the derived state.

The overview answers the questions a home screen or pet detail screen asks:
what is coming up, which vaccinations need attention, when is the next
feeding. Records come from a ``CareRecordSource``; a section whose records
cannot be loaded is logged and shown empty while the rest still work.
"""

from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from typing import TypeVar
from uuid import UUID

from petcare.config import AppConfig, get_config
from petcare.domain.models import (
    Appointment,
    FeedingProjection,
    HealthRecord,
    MealSchedule,
    Pet,
    PetProfile,
    PetSpecies,
    Vaccination,
    VaccinationAssessment,
)
from petcare.services.date_utils import is_same_day
from petcare.services.derived_state import (
    PetCareDerivedState,
    assess_vaccination,
    pet_profile,
    project_meal,
)
from petcare.services.record_source import CareRecordSource, Result, logger

T = TypeVar("T")


@dataclass(frozen=True)
class VaccinationAlert:
    """A vaccination that needs attention, with the pet it belongs to."""

    pet: Pet
    vaccination: Vaccination
    assessment: VaccinationAssessment


@dataclass(frozen=True)
class FeedingEntry:
    """One of today's feedings."""

    pet: Pet
    schedule: MealSchedule
    projection: FeedingProjection


class CareOverviewService:
    """
    Overview queries over one record source.

    Every query takes an optional ``pet_id`` (None means all pets) and an
    optional ``now`` (defaults to the current time in the configured zone).
    """

    def __init__(self, source: CareRecordSource, config: AppConfig | None = None) -> None:
        self.source = source
        self.config = config or get_config()
        self.logger = logger.bind(component="care_overview")

    def _now(self, now: datetime | None) -> datetime:
        return now or datetime.now(self.config.tzinfo)

    def _load(self, section: str, result: Result[list[T], Exception]) -> list[T]:
        """Unwrap a source result, degrading to an empty list on failure."""
        if result.is_err():
            self.logger.warning(
                "record_source_failed", section=section, error=str(result.unwrap_err())
            )
            return []
        return result.unwrap()

    def _pets_by_id(self) -> dict[UUID, Pet]:
        return {pet.id: pet for pet in self._load("pets", self.source.fetch_pets())}

    # Appointments

    def upcoming_appointments(
        self, pet_id: UUID | None = None, now: datetime | None = None
    ) -> list[Appointment]:
        """Open appointments from now on, soonest first, up to the configured limit."""
        now = self._now(now)
        appointments = self._load("appointments", self.source.fetch_appointments(pet_id))

        upcoming = sorted(
            (a for a in appointments if not a.is_done and a.date >= now),
            key=lambda a: a.date,
        )[: self.config.overview.upcoming_appointment_limit]

        self.logger.debug("upcoming_appointments_loaded", count=len(upcoming))
        return upcoming

    def today_appointments(
        self, pet_id: UUID | None = None, now: datetime | None = None
    ) -> list[Appointment]:
        now = self._now(now)
        return [a for a in self.upcoming_appointments(pet_id, now) if is_same_day(a.date, now)]

    # Vaccinations

    def vaccination_alerts(
        self, pet_id: UUID | None = None, now: datetime | None = None
    ) -> list[VaccinationAlert]:
        """
        Vaccinations that are expired, near expiry or due soon.

        Sorted expired first, then near expiry, then by days until expiry.
        """
        now = self._now(now)
        pets = self._pets_by_id()
        vaccinations = self._load("vaccinations", self.source.fetch_vaccinations(pet_id))

        alerts = []
        for vaccination in vaccinations:
            pet = pets.get(vaccination.pet_id)
            if pet is None:
                continue
            assessment = assess_vaccination(vaccination, now, self.config.care)
            if assessment.is_expired or assessment.is_expiry_near or assessment.is_next_due_near:
                alerts.append(VaccinationAlert(pet, vaccination, assessment))

        def alert_order(alert: VaccinationAlert) -> tuple[bool, bool, float]:
            days = alert.assessment.days_until_expiry
            return (
                not alert.assessment.is_expired,
                not alert.assessment.is_expiry_near,
                days if days is not None else float("inf"),
            )

        alerts.sort(key=alert_order)
        self.logger.info("vaccination_alerts_loaded", count=len(alerts))
        return alerts

    def expiring_vaccinations(
        self, pet_id: UUID | None = None, now: datetime | None = None
    ) -> list[Vaccination]:
        """Expired or near-expiry vaccinations, expired first, then by expiry date."""
        now = self._now(now)
        vaccinations = self._load("vaccinations", self.source.fetch_vaccinations(pet_id))

        expiring = []
        for vaccination in vaccinations:
            assessment = assess_vaccination(vaccination, now, self.config.care)
            if assessment.is_expired or assessment.is_expiry_near:
                expiring.append((not assessment.is_expired, vaccination))

        expiring.sort(key=lambda item: (item[0], item[1].expiry_date))
        return [vaccination for _, vaccination in expiring]

    def upcoming_vaccinations(
        self, pet_id: UUID | None = None, now: datetime | None = None
    ) -> list[Vaccination]:
        """Vaccinations with a next dose after now, soonest first."""
        now = self._now(now)
        vaccinations = self._load("vaccinations", self.source.fetch_vaccinations(pet_id))
        return sorted(
            (v for v in vaccinations if v.next_due_date is not None and v.next_due_date > now),
            key=lambda v: v.next_due_date,  # type: ignore[arg-type, return-value]
        )

    # Feeding

    def today_feedings(
        self, pet_id: UUID | None = None, now: datetime | None = None
    ) -> list[FeedingEntry]:
        """Active schedules that run today, ordered by time of day."""
        now = self._now(now)
        pets = self._pets_by_id()
        schedules = self._load("meal_schedules", self.source.fetch_meal_schedules(pet_id))

        entries = [
            FeedingEntry(pets[s.pet_id], s, project_meal(s, now, self.config.care))
            for s in schedules
            if s.pet_id in pets
            and s.is_active
            and PetCareDerivedState.is_scheduled_today(s.weekdays, now)
        ]
        entries.sort(key=lambda entry: entry.schedule.time_of_day.replace(tzinfo=None))

        self.logger.debug("today_feedings_loaded", count=len(entries))
        return entries

    def next_feeding(
        self, pet_id: UUID | None = None, now: datetime | None = None
    ) -> FeedingEntry | None:
        """
        The first of today's feedings still ahead of now.

        Once every feeding of the day has passed, the first one of the day is
        returned; None when nothing is scheduled today.
        """
        now = self._now(now)
        feedings = self.today_feedings(pet_id, now)

        for entry in feedings:
            if entry.schedule.time_of_day.replace(tzinfo=None) > now.time().replace(tzinfo=None):
                return entry
        return feedings[0] if feedings else None

    # Health records

    def weight_history(self, pet_id: UUID) -> list[tuple[datetime, float]]:
        """(date, weight) points, oldest first, the most recent configured number of them."""
        records = self._load("health_records", self.source.fetch_health_records(pet_id))
        weighed = sorted((r for r in records if r.weight_kg is not None), key=lambda r: r.date)
        recent = weighed[-self.config.overview.weight_history_limit :]
        return [(r.date, r.weight_kg) for r in recent if r.weight_kg is not None]

    def health_issues(self, pet_id: UUID | None = None) -> list[HealthRecord]:
        """Records with symptoms, newest first."""
        records = self._load("health_records", self.source.fetch_health_records(pet_id))
        return sorted((r for r in records if r.has_symptoms), key=lambda r: r.date, reverse=True)

    def health_records_between(
        self, pet_id: UUID, start: datetime, end: datetime
    ) -> list[HealthRecord]:
        """Records dated within [start, end], newest first."""
        records = self._load("health_records", self.source.fetch_health_records(pet_id))
        return sorted(
            (r for r in records if start <= r.date <= end), key=lambda r: r.date, reverse=True
        )

    def monthly_health_records(self, pet_id: UUID, year: int, month: int) -> list[HealthRecord]:
        if not 1 <= month <= 12:
            raise ValueError(f"Month must be 1-12, got {month}")
        tz = self.config.tzinfo
        records = self._load("health_records", self.source.fetch_health_records(pet_id))
        return sorted(
            (
                r
                for r in records
                if (local := r.date.astimezone(tz)).year == year and local.month == month
            ),
            key=lambda r: r.date,
            reverse=True,
        )

    # Pets

    def search_pets(self, text: str = "", species: PetSpecies | str | None = None) -> list[Pet]:
        """
        Pets whose name or breed contains the text (case-insensitive),
        optionally restricted to one species, sorted by name.
        """
        needle = text.strip().casefold()
        if isinstance(species, str) and not isinstance(species, PetSpecies):
            species = PetSpecies(species.strip().lower()) if species.strip() else None
        pets = self._load("pets", self.source.fetch_pets())

        def matches(pet: Pet) -> bool:
            if species is not None and pet.species != species:
                return False
            if not needle:
                return True
            return needle in pet.name.casefold() or needle in (pet.breed or "").casefold()

        return sorted(filter(matches, pets), key=lambda pet: pet.name.casefold())

    def count_by_species(self) -> dict[PetSpecies, int]:
        pets = self._load("pets", self.source.fetch_pets())
        counts = Counter(pet.species for pet in pets)
        return {species: counts.get(species, 0) for species in PetSpecies}

    def pet_profiles(self, now: datetime | None = None) -> list[PetProfile]:
        now = self._now(now)
        return [pet_profile(pet, now) for pet in self.search_pets()]
