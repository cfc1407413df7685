"""
Derived state for pet-care records.

Every computation here is a pure function of record fields and the current
instant: nothing is cached and nothing is written back. Classifiers take
their thresholds as keyword arguments defaulting to the standard values, and
the record-level helpers at the bottom read them from a ``CareConfig``.

Key concepts:
- Day counts: whole days between start-of-day(now) and start-of-day(target)
- Near expiry: expiry within 30 days, inclusive, non-negative
- Due soon: next dose within 14 days, inclusive, non-negative
- Active weekday set: subset of 1..7 (1 = Sunday) a meal schedule runs on
"""

from collections.abc import Iterable
from datetime import date, datetime, time, timedelta

from dateutil.relativedelta import relativedelta

from petcare.config import CareConfig, current_time
from petcare.domain.models import (
    ALL_WEEKDAYS,
    Appointment,
    AppointmentStatus,
    FeedingProjection,
    HealthRecord,
    HealthStatus,
    MealSchedule,
    MealStatus,
    Pet,
    PetAge,
    PetProfile,
    PetSpecies,
    Vaccination,
    VaccinationAssessment,
    VaccinationStatus,
    parse_weekdays,
)
from petcare.services.date_utils import (
    WEEKDAY_NAMES,
    at_time_of_day,
    days_remaining,
    is_same_day,
    weekday_number,
)

UNKNOWN_AGE = "unknown"
NEAR_EXPIRY_DAYS = 30
DUE_SOON_DAYS = 14
UPCOMING_APPOINTMENT_DAYS = 7
MEAL_SOON_MINUTES = 30
NORMAL_TEMPERATURE_RANGE = (38.0, 39.2)

WEEKEND = frozenset({1, 7})
WORKWEEK = frozenset({2, 3, 4, 5, 6})


class PetCareDerivedState:
    """Pure derived-state computations over record fields."""

    # Age

    @staticmethod
    def calculate_age(birthdate: date | None, now: datetime) -> PetAge | None:
        """
        Full years and remaining months since the birthdate.

        Returns None without a birthdate. A birthdate after now counts as zero.
        """
        if birthdate is None:
            return None

        today = now.date()
        if birthdate > today:
            return PetAge(years=0, months=0)

        elapsed = relativedelta(today, birthdate)
        return PetAge(years=elapsed.years, months=elapsed.months)

    @staticmethod
    def age_text(birthdate: date | None, now: datetime) -> str:
        """Age as "N years M months", "M months" under a year, or "unknown"."""
        age = PetCareDerivedState.calculate_age(birthdate, now)
        return age.text if age is not None else UNKNOWN_AGE

    # Vaccinations

    @staticmethod
    def classify_vaccination(
        administered_at: datetime,
        expiry_date: datetime | None,
        next_due_date: datetime | None,
        now: datetime,
        *,
        near_expiry_days: int = NEAR_EXPIRY_DAYS,
        due_soon_days: int = DUE_SOON_DAYS,
    ) -> VaccinationAssessment:
        """
        Classify a vaccination. First match wins:

        expired > near_expiry > due_soon > valid > unknown

        The administration date does not affect the status; it is part of the
        record being assessed.
        """
        days_until_expiry = days_remaining(expiry_date, now) if expiry_date is not None else None
        days_until_due = days_remaining(next_due_date, now) if next_due_date is not None else None

        is_expired = expiry_date is not None and expiry_date < now
        is_expiry_near = (
            days_until_expiry is not None and 0 <= days_until_expiry <= near_expiry_days
        )
        is_next_due_near = days_until_due is not None and 0 <= days_until_due <= due_soon_days

        if is_expired:
            status = VaccinationStatus.EXPIRED
        elif is_expiry_near:
            status = VaccinationStatus.NEAR_EXPIRY
        elif is_next_due_near:
            status = VaccinationStatus.DUE_SOON
        elif expiry_date is not None:
            status = VaccinationStatus.VALID
        else:
            status = VaccinationStatus.UNKNOWN

        return VaccinationAssessment(
            status=status,
            description=_vaccination_description(status, days_until_expiry, days_until_due),
            days_until_expiry=days_until_expiry,
            days_until_next_due=days_until_due,
            is_expired=is_expired,
            is_expiry_near=is_expiry_near,
            is_next_due_near=is_next_due_near,
        )

    # Feeding

    @staticmethod
    def next_feeding_time(
        time_of_day: time,
        is_active: bool,
        weekdays: Iterable[int] | str | None,
        now: datetime,
    ) -> datetime | None:
        """
        Project the next feeding of a weekly schedule.

        Today's feeding is returned while its time is still ahead. After that
        the next active weekday later in the week is used, wrapping to the
        first active weekday of next week (offset 7 - today + first).
        """
        if not is_active:
            return None

        active = sorted(parse_weekdays(weekdays))
        if not active:
            return None

        today_at = at_time_of_day(now.date(), time_of_day, now)
        if today_at > now:
            return today_at

        current = weekday_number(now)
        later_this_week = next((day for day in active if day > current), None)
        if later_this_week is not None:
            offset = later_this_week - current
        else:
            offset = 7 - current + active[0]

        return at_time_of_day(now.date() + timedelta(days=offset), time_of_day, now)

    @staticmethod
    def minutes_until(moment: datetime, now: datetime) -> int:
        """Whole minutes from now until the moment, rounded down."""
        return int((moment - now).total_seconds() // 60)

    @staticmethod
    def time_until_text(minutes: int | None) -> str | None:
        """Format as "<H>h<M>m later" ("<H>h later" on the hour), "<M>m later" below an hour."""
        if minutes is None:
            return None
        if minutes < 60:
            return f"{minutes}m later"
        hours, remaining = divmod(minutes, 60)
        if remaining == 0:
            return f"{hours}h later"
        return f"{hours}h{remaining}m later"

    @staticmethod
    def project_feeding(
        time_of_day: time,
        is_active: bool,
        weekdays: Iterable[int] | str | None,
        now: datetime,
        *,
        soon_minutes: int = MEAL_SOON_MINUTES,
    ) -> FeedingProjection:
        """Next feeding time, minutes until it, its text and the meal status."""
        if not is_active:
            return FeedingProjection(status=MealStatus.INACTIVE)

        next_at = PetCareDerivedState.next_feeding_time(time_of_day, is_active, weekdays, now)
        if next_at is None:
            return FeedingProjection(status=MealStatus.PAST)

        minutes = PetCareDerivedState.minutes_until(next_at, now)
        return FeedingProjection(
            status=MealStatus.SOON if minutes <= soon_minutes else MealStatus.UPCOMING,
            next_feeding_at=next_at,
            minutes_until=minutes,
            time_until_text=PetCareDerivedState.time_until_text(minutes),
        )

    @staticmethod
    def is_scheduled_today(weekdays: Iterable[int] | str | None, now: datetime) -> bool:
        return weekday_number(now) in parse_weekdays(weekdays)

    @staticmethod
    def weekday_label(weekdays: Iterable[int] | str | None) -> str:
        """Label as "Every day", "Weekends", "Weekdays", or day names joined by "/"."""
        active = parse_weekdays(weekdays)

        if active == ALL_WEEKDAYS:
            return "Every day"
        if active == WEEKEND:
            return "Weekends"
        if active == WORKWEEK:
            return "Weekdays"
        if not active:
            return "No days"
        return "/".join(WEEKDAY_NAMES[day] for day in sorted(active))

    # Appointments

    @staticmethod
    def classify_appointment(is_done: bool, when: datetime, now: datetime) -> AppointmentStatus:
        """completed > today > past > upcoming."""
        if is_done:
            return AppointmentStatus.COMPLETED
        if is_same_day(when, now):
            return AppointmentStatus.TODAY
        if when < now:
            return AppointmentStatus.PAST
        return AppointmentStatus.UPCOMING

    @staticmethod
    def is_upcoming_within(
        when: datetime, now: datetime, days: int = UPCOMING_APPOINTMENT_DAYS
    ) -> bool:
        return 0 <= days_remaining(when, now) <= days

    # Health

    @staticmethod
    def is_temperature_normal(
        temperature_c: float | None,
        normal_range: tuple[float, float] = NORMAL_TEMPERATURE_RANGE,
    ) -> bool | None:
        if temperature_c is None:
            return None
        low, high = normal_range
        return low <= temperature_c <= high

    @staticmethod
    def classify_health(
        symptoms: str | None,
        temperature_c: float | None,
        weight_kg: float | None = None,
        *,
        normal_range: tuple[float, float] = NORMAL_TEMPERATURE_RANGE,
    ) -> HealthStatus:
        """
        Classify a health record.

        Symptoms give a warning regardless of temperature. Otherwise a
        temperature outside the normal range is an alert, and any measurement
        at all is good.
        """
        if symptoms:
            return HealthStatus.WARNING
        if PetCareDerivedState.is_temperature_normal(temperature_c, normal_range) is False:
            return HealthStatus.ALERT
        if weight_kg is not None or temperature_c is not None:
            return HealthStatus.GOOD
        return HealthStatus.UNKNOWN

    @staticmethod
    def health_summary_text(
        weight_kg: float | None,
        temperature_c: float | None,
        symptoms: str | None,
        medications: str | None,
    ) -> str:
        parts: list[str] = []
        if weight_kg is not None:
            parts.append(f"Weight: {weight_kg:.1f} kg")
        if temperature_c is not None:
            parts.append(f"Temperature: {temperature_c:.1f} °C")
        if symptoms:
            parts.append("Symptoms")
        if medications:
            parts.append("Medications")
        return ", ".join(parts) if parts else "Record only"

    # Pet display values

    @staticmethod
    def species_label(species: PetSpecies) -> str:
        return species.value.capitalize()

    @staticmethod
    def gender_text(gender: str | None) -> str:
        if not gender:
            return "Unknown"
        normalized = gender.strip().lower()
        if normalized == "male":
            return "Male"
        if normalized == "female":
            return "Female"
        return gender

    @staticmethod
    def weight_text(weight_kg: float | None) -> str:
        if weight_kg is None:
            return "Not measured"
        return f"{weight_kg:.1f} kg"


def _vaccination_description(
    status: VaccinationStatus, days_until_expiry: int | None, days_until_due: int | None
) -> str:
    if status == VaccinationStatus.EXPIRED:
        if days_until_expiry is not None and days_until_expiry < 0:
            return f"Expired {-days_until_expiry} days ago"
        return "Expired today"
    if status == VaccinationStatus.NEAR_EXPIRY:
        return f"Expires in {days_until_expiry} days"
    if status == VaccinationStatus.DUE_SOON:
        return f"Next dose due in {days_until_due} days"
    if status == VaccinationStatus.VALID:
        return f"{days_until_expiry} days until expiry"
    return "No expiry date set"


# Record-level helpers: the same computations fed from stored records


def pet_profile(pet: Pet, now: datetime | None = None) -> PetProfile:
    """Map a stored pet to its read-only display projection."""
    now = now or current_time()
    return PetProfile(
        pet_id=pet.id,
        name=pet.name,
        species=pet.species,
        species_label=PetCareDerivedState.species_label(pet.species),
        breed=pet.breed,
        age_text=PetCareDerivedState.age_text(pet.birthdate, now),
        gender_text=PetCareDerivedState.gender_text(pet.gender),
        weight_text=PetCareDerivedState.weight_text(pet.weight_kg),
    )


def assess_vaccination(
    vaccination: Vaccination, now: datetime | None = None, care: CareConfig | None = None
) -> VaccinationAssessment:
    care = care or CareConfig()
    return PetCareDerivedState.classify_vaccination(
        vaccination.date,
        vaccination.expiry_date,
        vaccination.next_due_date,
        now or current_time(),
        near_expiry_days=care.near_expiry_days,
        due_soon_days=care.due_soon_days,
    )


def project_meal(
    schedule: MealSchedule, now: datetime | None = None, care: CareConfig | None = None
) -> FeedingProjection:
    care = care or CareConfig()
    return PetCareDerivedState.project_feeding(
        schedule.time_of_day,
        schedule.is_active,
        schedule.weekdays,
        now or current_time(),
        soon_minutes=care.meal_soon_minutes,
    )


def appointment_status(appointment: Appointment, now: datetime | None = None) -> AppointmentStatus:
    return PetCareDerivedState.classify_appointment(
        appointment.is_done, appointment.date, now or current_time()
    )


def is_appointment_upcoming(
    appointment: Appointment, now: datetime | None = None, care: CareConfig | None = None
) -> bool:
    care = care or CareConfig()
    return PetCareDerivedState.is_upcoming_within(
        appointment.date, now or current_time(), care.upcoming_appointment_days
    )


def health_status(record: HealthRecord, care: CareConfig | None = None) -> HealthStatus:
    care = care or CareConfig()
    return PetCareDerivedState.classify_health(
        record.symptoms,
        record.temperature_c,
        record.weight_kg,
        normal_range=(care.normal_temperature_min, care.normal_temperature_max),
    )
