"""
Sample records for demos and manual testing.

All dates are placed relative to ``now`` so the overview always has something
due, expiring and upcoming to show.
"""

from datetime import datetime, time, timedelta

from dateutil.relativedelta import relativedelta

from petcare.domain.models import (
    Appointment,
    AppointmentType,
    HealthRecord,
    MealSchedule,
    Pet,
    PetSpecies,
    Vaccination,
)
from petcare.services.record_source import InMemoryCareRecords


def _at(moment: datetime, hour: int, minute: int = 0) -> datetime:
    return moment.replace(hour=hour, minute=minute, second=0, microsecond=0)


def build_sample_records(now: datetime) -> InMemoryCareRecords:
    """Create an in-memory store with three pets and their records."""
    records = InMemoryCareRecords()

    mocha = records.add_pet(
        Pet(
            name="Mocha",
            species=PetSpecies.DOG,
            breed="Shiba Inu",
            birthdate=(now - relativedelta(years=3)).date(),
            gender="female",
            weight_kg=8.5,
            notes="Loves walks, twice a day.",
        )
    )
    mike = records.add_pet(
        Pet(
            name="Mike",
            species=PetSpecies.CAT,
            breed="Calico",
            birthdate=(now - relativedelta(months=8)).date(),
            gender="male",
            weight_kg=4.2,
        )
    )
    records.add_pet(
        Pet(
            name="Pii",
            species=PetSpecies.BIRD,
            breed="Budgerigar",
            birthdate=(now - relativedelta(months=14)).date(),
            gender="female",
            weight_kg=0.035,
        )
    )

    for days_ago, weight, temperature, symptoms, medications in (
        (0, 8.5, 38.5, None, None),
        (7, 8.3, 38.7, "Slight loss of appetite", "Vitamins"),
        (14, 8.2, 39.2, None, None),
    ):
        records.add_health_record(
            HealthRecord(
                pet_id=mocha.id,
                date=now - timedelta(days=days_ago),
                weight_kg=weight,
                temperature_c=temperature,
                symptoms=symptoms,
                medications=medications,
            )
        )

    combo_given = now - relativedelta(months=3)
    records.add_vaccination(
        Vaccination(
            pet_id=mocha.id,
            name="Combination vaccine",
            date=combo_given,
            expiry_date=combo_given + relativedelta(years=1),
            vet_name="Dr. Suzuki",
            clinic_name="Yamato Animal Hospital",
            next_due_date=now + relativedelta(months=9),
        )
    )
    rabies_given = now - relativedelta(months=1)
    records.add_vaccination(
        Vaccination(
            pet_id=mocha.id,
            name="Rabies",
            date=rabies_given,
            expiry_date=rabies_given + relativedelta(years=1),
            clinic_name="Murata Animal Hospital",
        )
    )
    heartworm_given = now - timedelta(days=15)
    records.add_vaccination(
        Vaccination(
            pet_id=mocha.id,
            name="Heartworm prevention",
            date=heartworm_given,
            expiry_date=heartworm_given + relativedelta(months=1),
            next_due_date=now + timedelta(days=15),
        )
    )
    records.add_vaccination(
        Vaccination(
            pet_id=mike.id,
            name="FVRCP",
            date=now - relativedelta(years=1, days=10),
            expiry_date=now - timedelta(days=10),
        )
    )

    for pet, name, at, amount, food, weekdays in (
        (mocha, "Breakfast", time(7, 30), 150, "Dry food", "1,2,3,4,5,6,7"),
        (mocha, "Dinner", time(18, 0), 150, "Dry food", "1,2,3,4,5,6,7"),
        (mocha, "Treat", time(15, 0), 30, "Jerky", "1,7"),
        (mike, "Breakfast", time(8, 0), 60, "Wet food", "1,2,3,4,5,6,7"),
    ):
        records.add_meal_schedule(
            MealSchedule(
                pet_id=pet.id,
                name=name,
                time_of_day=at,
                amount_g=amount,
                food_type=food,
                weekdays=weekdays,
            )
        )

    appointments = [
        (mocha, "Annual checkup", AppointmentType.VET, _at(now + timedelta(days=5), 14, 30), 60),
        (mocha, "Grooming", AppointmentType.GROOMING, _at(now, 23), 90),
        (mike, "Training class", AppointmentType.OTHER, _at(now + timedelta(days=10), 16), 120),
    ]
    for pet, title, kind, when, duration in appointments:
        records.add_appointment(
            Appointment(
                pet_id=pet.id,
                title=title,
                type=kind,
                date=when,
                time_of_day=when.time(),
                duration_minutes=duration,
                reminder_minutes=60,
            )
        )

    return records
