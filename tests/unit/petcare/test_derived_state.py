"""
Tests for the derived-state computations in `petcare/services/derived_state.py`.

Covers:
- Age in full years and remaining months
- Vaccination classification priority and day-count boundaries
- Next-feeding projection across the week wrap
- Appointment and health classification
- Display text helpers

All tests pass a fixed ``now``: Wednesday 2026-10-14 09:00 UTC unless noted.
"""

from datetime import UTC, date, datetime, time, timedelta
from zoneinfo import ZoneInfo

import pytest
from hypothesis import given
from hypothesis import strategies as st

from petcare.config import CareConfig
from petcare.domain.models import (
    Appointment,
    AppointmentStatus,
    HealthRecord,
    HealthStatus,
    MealSchedule,
    MealStatus,
    Pet,
    PetSpecies,
    Vaccination,
    VaccinationStatus,
)
from petcare.services.derived_state import (
    PetCareDerivedState,
    appointment_status,
    assess_vaccination,
    health_status,
    is_appointment_upcoming,
    pet_profile,
    project_meal,
)

NOW = datetime(2026, 10, 14, 9, 0, tzinfo=UTC)  # Wednesday
PET_ID = Pet(name="Mocha").id

state = PetCareDerivedState


class TestAge:
    def test_years_and_months(self) -> None:
        age = state.calculate_age(date(2023, 7, 14), NOW)

        assert age is not None
        assert (age.years, age.months) == (3, 3)
        assert age.text == "3 years 3 months"

    def test_under_a_year_shows_months_only(self) -> None:
        assert state.age_text(date(2026, 3, 1), NOW) == "7 months"

    def test_birthday_not_yet_reached_this_month(self) -> None:
        age = state.calculate_age(date(2025, 10, 15), NOW)

        assert age is not None
        assert (age.years, age.months) == (0, 11)

    def test_missing_birthdate_is_unknown(self) -> None:
        assert state.calculate_age(None, NOW) is None
        assert state.age_text(None, NOW) == "unknown"

    def test_future_birthdate_counts_as_zero(self) -> None:
        assert state.age_text(date(2027, 1, 1), NOW) == "0 months"

    @given(birthdate=st.dates(min_value=date(1990, 1, 1), max_value=date(2026, 10, 14)))
    def test_months_always_below_twelve(self, birthdate: date) -> None:
        """Property-based test: any past birthdate yields 0 <= months <= 11."""
        age = state.calculate_age(birthdate, NOW)

        assert age is not None
        assert age.years >= 0
        assert 0 <= age.months <= 11


class TestVaccinationClassification:
    administered = NOW - timedelta(days=300)

    def classify(
        self, expiry: datetime | None, next_due: datetime | None, now: datetime = NOW
    ) -> VaccinationStatus:
        return state.classify_vaccination(self.administered, expiry, next_due, now).status

    def test_expired_wins_over_due_soon(self) -> None:
        assessment = state.classify_vaccination(
            self.administered, NOW - timedelta(days=1), NOW + timedelta(days=3), NOW
        )

        assert assessment.status == VaccinationStatus.EXPIRED
        assert assessment.days_until_expiry == -1
        assert assessment.is_expired
        assert assessment.is_next_due_near
        assert assessment.description == "Expired 1 days ago"

    def test_near_expiry_boundary_is_inclusive(self) -> None:
        assessment = state.classify_vaccination(
            self.administered, NOW + timedelta(days=30), None, NOW
        )

        assert assessment.status == VaccinationStatus.NEAR_EXPIRY
        assert assessment.days_until_expiry == 30
        assert assessment.description == "Expires in 30 days"

    def test_thirty_one_days_is_valid(self) -> None:
        assessment = state.classify_vaccination(
            self.administered, NOW + timedelta(days=31), None, NOW
        )

        assert assessment.status == VaccinationStatus.VALID
        assert assessment.description == "31 days until expiry"

    def test_near_expiry_wins_over_due_soon(self) -> None:
        status = self.classify(NOW + timedelta(days=20), NOW + timedelta(days=5))
        assert status == VaccinationStatus.NEAR_EXPIRY

    @pytest.mark.parametrize(
        "due_in_days,expected",
        [
            (0, VaccinationStatus.DUE_SOON),
            (14, VaccinationStatus.DUE_SOON),
            (15, VaccinationStatus.VALID),
            (-1, VaccinationStatus.VALID),
        ],
    )
    def test_due_soon_window(self, due_in_days: int, expected: VaccinationStatus) -> None:
        status = self.classify(NOW + timedelta(days=200), NOW + timedelta(days=due_in_days))
        assert status == expected

    def test_due_soon_without_expiry(self) -> None:
        assessment = state.classify_vaccination(
            self.administered, None, NOW + timedelta(days=5), NOW
        )

        assert assessment.status == VaccinationStatus.DUE_SOON
        assert assessment.days_until_next_due == 5
        assert assessment.description == "Next dose due in 5 days"

    def test_no_dates_is_unknown(self) -> None:
        assessment = state.classify_vaccination(self.administered, None, None, NOW)

        assert assessment.status == VaccinationStatus.UNKNOWN
        assert assessment.days_until_expiry is None
        assert assessment.description == "No expiry date set"

    def test_expiry_earlier_today_is_expired(self) -> None:
        assessment = state.classify_vaccination(
            self.administered, NOW - timedelta(hours=1), None, NOW
        )

        assert assessment.status == VaccinationStatus.EXPIRED
        assert assessment.days_until_expiry == 0
        assert assessment.description == "Expired today"

    def test_expiry_later_today_is_near_expiry(self) -> None:
        assessment = state.classify_vaccination(
            self.administered, NOW + timedelta(hours=1), None, NOW
        )

        assert assessment.status == VaccinationStatus.NEAR_EXPIRY
        assert assessment.days_until_expiry == 0

    def test_days_counted_in_local_calendar(self) -> None:
        tokyo = ZoneInfo("Asia/Tokyo")
        now = datetime(2026, 10, 14, 23, 30, tzinfo=tokyo)
        expiry = datetime(2026, 10, 14, 15, 0, tzinfo=UTC)  # 00:00 on the 15th in Tokyo

        assessment = state.classify_vaccination(self.administered, expiry, None, now)

        assert assessment.days_until_expiry == 1

    def test_flags_are_independent_of_status(self) -> None:
        assessment = state.classify_vaccination(
            self.administered, NOW + timedelta(days=20), NOW + timedelta(days=5), NOW
        )

        assert assessment.status == VaccinationStatus.NEAR_EXPIRY
        assert assessment.is_expiry_near
        assert assessment.is_next_due_near
        assert not assessment.is_expired

    def test_expired_earlier_today_is_also_near(self) -> None:
        assessment = state.classify_vaccination(
            self.administered, NOW - timedelta(hours=1), None, NOW
        )

        assert assessment.status == VaccinationStatus.EXPIRED
        assert assessment.is_expired
        assert assessment.is_expiry_near
        assert not assessment.is_next_due_near

    def test_valid_vaccination_has_no_flags(self) -> None:
        assessment = state.classify_vaccination(
            self.administered, NOW + timedelta(days=200), NOW + timedelta(days=100), NOW
        )

        assert assessment.status == VaccinationStatus.VALID
        assert not (
            assessment.is_expired or assessment.is_expiry_near or assessment.is_next_due_near
        )

    def test_classification_is_idempotent(self) -> None:
        args = (self.administered, NOW + timedelta(days=10), NOW + timedelta(days=3), NOW)
        assert state.classify_vaccination(*args) == state.classify_vaccination(*args)

    def test_configured_thresholds_are_used(self) -> None:
        vaccination = Vaccination(
            pet_id=PET_ID,
            name="Rabies",
            date=self.administered,
            expiry_date=NOW + timedelta(days=20),
        )

        assert assess_vaccination(vaccination, NOW).status == VaccinationStatus.NEAR_EXPIRY
        assert (
            assess_vaccination(vaccination, NOW, CareConfig(near_expiry_days=10)).status
            == VaccinationStatus.VALID
        )


class TestNextFeeding:
    def test_wraps_to_first_weekday_of_next_week(self) -> None:
        # Wednesday 09:00, schedule Mon/Wed at 08:00 -> next Monday
        next_at = state.next_feeding_time(time(8, 0), True, {2, 4}, NOW)
        assert next_at == datetime(2026, 10, 19, 8, 0, tzinfo=UTC)

    def test_later_weekday_in_same_week(self) -> None:
        next_at = state.next_feeding_time(time(8, 0), True, {2, 6}, NOW)
        assert next_at == datetime(2026, 10, 16, 8, 0, tzinfo=UTC)

    def test_same_day_when_time_still_ahead(self) -> None:
        projection = state.project_feeding(time(20, 0), True, {2, 4}, NOW)

        assert projection.next_feeding_at == datetime(2026, 10, 14, 20, 0, tzinfo=UTC)
        assert projection.minutes_until == 660
        assert projection.time_until_text == "11h later"
        assert projection.status == MealStatus.UPCOMING

    def test_today_counts_while_time_ahead_even_if_inactive_day(self) -> None:
        next_at = state.next_feeding_time(time(20, 0), True, {2}, NOW)
        assert next_at == datetime(2026, 10, 14, 20, 0, tzinfo=UTC)

    def test_saturday_only_schedule_on_saturday_after_time(self) -> None:
        saturday = datetime(2026, 10, 17, 10, 0, tzinfo=UTC)
        next_at = state.next_feeding_time(time(8, 0), True, {7}, saturday)
        assert next_at == datetime(2026, 10, 24, 8, 0, tzinfo=UTC)

    def test_sunday_only_schedule_on_sunday_after_time(self) -> None:
        sunday = datetime(2026, 10, 18, 10, 0, tzinfo=UTC)
        next_at = state.next_feeding_time(time(8, 0), True, {1}, sunday)
        assert next_at == datetime(2026, 10, 25, 8, 0, tzinfo=UTC)

    def test_weekdays_accept_storage_encoding(self) -> None:
        next_at = state.next_feeding_time(time(8, 0), True, "2,4", NOW)
        assert next_at == datetime(2026, 10, 19, 8, 0, tzinfo=UTC)

    @pytest.mark.parametrize("weekdays", [set(), "", "0,8,x", None])
    def test_no_valid_weekdays_gives_none(self, weekdays: object) -> None:
        next_at = state.next_feeding_time(time(20, 0), True, weekdays, NOW)  # type: ignore[arg-type]
        assert next_at is None

    def test_inactive_schedule_gives_none(self) -> None:
        assert state.next_feeding_time(time(20, 0), False, {1, 2, 3, 4, 5, 6, 7}, NOW) is None

    def test_inactive_status(self) -> None:
        projection = state.project_feeding(time(20, 0), False, {4}, NOW)

        assert projection.status == MealStatus.INACTIVE
        assert projection.next_feeding_at is None
        assert projection.minutes_until is None
        assert projection.time_until_text is None

    def test_active_without_weekdays_is_past(self) -> None:
        projection = state.project_feeding(time(20, 0), True, set(), NOW)

        assert projection.status == MealStatus.PAST
        assert projection.next_feeding_at is None

    @pytest.mark.parametrize(
        "at,expected_status,expected_text",
        [
            (time(9, 30), MealStatus.SOON, "30m later"),
            (time(9, 31), MealStatus.UPCOMING, "31m later"),
            (time(10, 0), MealStatus.UPCOMING, "1h later"),
        ],
    )
    def test_soon_window(self, at: time, expected_status: MealStatus, expected_text: str) -> None:
        projection = state.project_feeding(at, True, {4}, NOW)

        assert projection.status == expected_status
        assert projection.time_until_text == expected_text

    def test_meal_schedule_helper_uses_configured_window(self) -> None:
        schedule = MealSchedule(pet_id=PET_ID, name="Snack", time_of_day=time(9, 20))

        assert project_meal(schedule, NOW).status == MealStatus.SOON
        assert project_meal(schedule, NOW, CareConfig(meal_soon_minutes=10)).status == (
            MealStatus.UPCOMING
        )

    @given(
        now=st.datetimes(
            min_value=datetime(2000, 1, 1),
            max_value=datetime(2099, 12, 31),
            timezones=st.just(UTC),
        ),
        at=st.times(),
        weekdays=st.frozensets(st.integers(min_value=1, max_value=7), min_size=1),
    )
    def test_next_feeding_is_within_a_week(
        self, now: datetime, at: time, weekdays: frozenset[int]
    ) -> None:
        """Property-based test: the projection is strictly ahead and at most 7 days out."""
        next_at = state.next_feeding_time(at, True, weekdays, now)

        assert next_at is not None
        assert now < next_at <= now + timedelta(days=7)
        assert next_at.time() == at


class TestWeekdayHelpers:
    @pytest.mark.parametrize(
        "weekdays,label",
        [
            ({1, 2, 3, 4, 5, 6, 7}, "Every day"),
            ({1, 7}, "Weekends"),
            ({2, 3, 4, 5, 6}, "Weekdays"),
            (set(), "No days"),
            ("2,4", "Mon/Wed"),
            ({7, 1, 3}, "Sun/Tue/Sat"),
        ],
    )
    def test_weekday_label(self, weekdays: object, label: str) -> None:
        assert state.weekday_label(weekdays) == label  # type: ignore[arg-type]

    def test_is_scheduled_today(self) -> None:
        assert state.is_scheduled_today({4}, NOW)
        assert not state.is_scheduled_today({1, 7}, NOW)


class TestAppointmentClassification:
    @given(
        when=st.datetimes(
            min_value=datetime(2000, 1, 1),
            max_value=datetime(2099, 12, 31),
            timezones=st.just(UTC),
        )
    )
    def test_done_is_always_completed(self, when: datetime) -> None:
        assert state.classify_appointment(True, when, NOW) == AppointmentStatus.COMPLETED

    @pytest.mark.parametrize(
        "offset,expected",
        [
            (timedelta(hours=-2), AppointmentStatus.TODAY),
            (timedelta(hours=5), AppointmentStatus.TODAY),
            (timedelta(days=-1), AppointmentStatus.PAST),
            (timedelta(days=1), AppointmentStatus.UPCOMING),
        ],
    )
    def test_open_appointment_status(
        self, offset: timedelta, expected: AppointmentStatus
    ) -> None:
        assert state.classify_appointment(False, NOW + offset, NOW) == expected

    @pytest.mark.parametrize(
        "offset_days,expected", [(0, True), (7, True), (8, False), (-1, False)]
    )
    def test_upcoming_window(self, offset_days: int, expected: bool) -> None:
        assert state.is_upcoming_within(NOW + timedelta(days=offset_days), NOW) is expected

    def test_record_helpers(self) -> None:
        appointment = Appointment(
            pet_id=PET_ID, title="Checkup", date=NOW + timedelta(days=5), type="VET"
        )

        assert appointment_status(appointment, NOW) == AppointmentStatus.UPCOMING
        assert is_appointment_upcoming(appointment, NOW)
        assert not is_appointment_upcoming(
            appointment, NOW, CareConfig(upcoming_appointment_days=3)
        )


class TestHealthClassification:
    def test_symptoms_with_normal_temperature_is_warning(self) -> None:
        assert state.classify_health("Coughing", 38.5) == HealthStatus.WARNING

    def test_symptoms_win_over_abnormal_temperature(self) -> None:
        assert state.classify_health("Coughing", 40.1) == HealthStatus.WARNING

    @pytest.mark.parametrize("temperature", [37.9, 39.3])
    def test_abnormal_temperature_is_alert(self, temperature: float) -> None:
        assert state.classify_health(None, temperature) == HealthStatus.ALERT

    @pytest.mark.parametrize("temperature", [38.0, 38.6, 39.2])
    def test_normal_range_is_inclusive(self, temperature: float) -> None:
        assert state.classify_health(None, temperature) == HealthStatus.GOOD

    def test_is_temperature_normal(self) -> None:
        assert state.is_temperature_normal(38.5) is True
        assert state.is_temperature_normal(40.0) is False
        assert state.is_temperature_normal(None) is None
        assert state.is_temperature_normal(39.5, (37.5, 39.5)) is True

    def test_weight_only_is_good(self) -> None:
        assert state.classify_health(None, None, 8.5) == HealthStatus.GOOD

    def test_empty_symptoms_do_not_count(self) -> None:
        assert state.classify_health("", None) == HealthStatus.UNKNOWN

    def test_record_helper_uses_configured_range(self) -> None:
        record = HealthRecord(pet_id=PET_ID, date=NOW, temperature_c=39.5)

        assert health_status(record) == HealthStatus.ALERT
        assert (
            health_status(record, CareConfig(normal_temperature_max=40.0)) == HealthStatus.GOOD
        )

    def test_summary_text(self) -> None:
        assert (
            state.health_summary_text(8.5, 38.5, "Coughing", "Antibiotics")
            == "Weight: 8.5 kg, Temperature: 38.5 °C, Symptoms, Medications"
        )
        assert state.health_summary_text(None, None, None, None) == "Record only"


class TestDisplayText:
    @pytest.mark.parametrize(
        "minutes,text",
        [
            (0, "0m later"),
            (59, "59m later"),
            (60, "1h later"),
            (120, "2h later"),
            (125, "2h5m later"),
        ],
    )
    def test_time_until_text(self, minutes: int, text: str) -> None:
        assert state.time_until_text(minutes) == text

    def test_minutes_until_rounds_down(self) -> None:
        assert state.minutes_until(NOW + timedelta(minutes=90, seconds=59), NOW) == 90
        assert state.minutes_until(NOW + timedelta(seconds=59), NOW) == 0

    def test_time_until_text_none(self) -> None:
        assert state.time_until_text(None) is None

    @pytest.mark.parametrize(
        "gender,text",
        [("male", "Male"), (" Female ", "Female"), ("unsure", "unsure"), (None, "Unknown")],
    )
    def test_gender_text(self, gender: str | None, text: str) -> None:
        assert state.gender_text(gender) == text

    def test_weight_text(self) -> None:
        assert state.weight_text(8.46) == "8.5 kg"
        assert state.weight_text(None) == "Not measured"

    def test_pet_profile(self) -> None:
        pet = Pet(
            name="Mocha",
            species="Dog",
            breed="Shiba Inu",
            birthdate=date(2023, 7, 14),
            gender="female",
            weight_kg=8.5,
        )

        profile = pet_profile(pet, NOW)

        assert profile.pet_id == pet.id
        assert profile.species == PetSpecies.DOG
        assert profile.species_label == "Dog"
        assert profile.age_text == "3 years 3 months"
        assert profile.gender_text == "Female"
        assert profile.weight_text == "8.5 kg"
