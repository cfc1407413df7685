"""
Console overview of pet-care records.

Renders pet profiles, vaccination alerts, today's feedings and upcoming
appointments for the sample records, using the same derived state the
library exposes.

Run with: uv run petcare-overview --species dog
"""

import argparse
from collections.abc import Sequence
from datetime import datetime

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from petcare.config import AppConfig, get_config
from petcare.domain.models import PetSpecies, VaccinationStatus
from petcare.sample_data import build_sample_records
from petcare.services.care_overview import CareOverviewService
from petcare.services.derived_state import PetCareDerivedState, appointment_status, pet_profile
from petcare.services.record_source import configure_logging

console = Console()

STATUS_STYLES = {
    VaccinationStatus.EXPIRED: "red",
    VaccinationStatus.NEAR_EXPIRY: "yellow",
    VaccinationStatus.DUE_SOON: "yellow",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="petcare-overview", description="Show the pet-care overview for sample records."
    )
    parser.add_argument("--pet", default="", help="Only pets whose name or breed contains this")
    parser.add_argument(
        "--species",
        choices=[species.value for species in PetSpecies],
        help="Only pets of this species",
    )
    return parser


def render_overview(
    overview: CareOverviewService,
    now: datetime,
    name_filter: str = "",
    species: str | None = None,
) -> None:
    """Print every overview section for the pets matching the filters."""
    pets = overview.search_pets(name_filter, species)
    if not pets:
        console.print("No pets match the filters", style="yellow")
        return

    profiles = Table(title="Pets")
    for column in ("Name", "Species", "Breed", "Age", "Gender", "Weight"):
        profiles.add_column(column, style="cyan" if column == "Name" else "white")

    alerts = Table(title="Vaccination Alerts")
    for column in ("Pet", "Vaccination", "Status", "Details"):
        alerts.add_column(column)

    feedings = Table(title="Today's Feedings")
    for column in ("Pet", "Meal", "Time", "Days", "Next"):
        feedings.add_column(column)

    appointments = Table(title="Upcoming Appointments")
    for column in ("Pet", "Title", "When", "Status"):
        appointments.add_column(column)

    for pet in pets:
        profile = pet_profile(pet, now)
        profiles.add_row(
            profile.name,
            profile.species_label,
            profile.breed or "-",
            profile.age_text,
            profile.gender_text,
            profile.weight_text,
        )

        for alert in overview.vaccination_alerts(pet.id, now):
            style = STATUS_STYLES.get(alert.assessment.status, "white")
            alerts.add_row(
                pet.name,
                alert.vaccination.name,
                f"[{style}]{alert.assessment.status.value}[/{style}]",
                alert.assessment.description,
            )

        for entry in overview.today_feedings(pet.id, now):
            feedings.add_row(
                pet.name,
                entry.schedule.name,
                entry.schedule.time_of_day.strftime("%H:%M"),
                PetCareDerivedState.weekday_label(entry.schedule.weekdays),
                entry.projection.time_until_text or "-",
            )

        for appointment in overview.upcoming_appointments(pet.id, now):
            appointments.add_row(
                pet.name,
                appointment.title,
                appointment.scheduled_at.strftime("%Y/%m/%d %H:%M"),
                appointment_status(appointment, now).value,
            )

    for table in (profiles, alerts, feedings, appointments):
        console.print(table)

    next_feeding = overview.next_feeding(pets[0].id if len(pets) == 1 else None, now)
    if next_feeding is not None:
        console.print(
            f"🍽️  Next feeding: {next_feeding.pet.name} - {next_feeding.schedule.name} "
            f"({next_feeding.projection.time_until_text or 'today'})",
            style="green",
        )


def main(argv: Sequence[str] | None = None, config: AppConfig | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = config or get_config()
    configure_logging(config.logging)

    now = datetime.now(config.tzinfo)
    console.print(Panel(f"🐾 PetCare Overview - {now:%Y/%m/%d %H:%M}", style="bold blue"))

    overview = CareOverviewService(build_sample_records(now), config)
    render_overview(overview, now, args.pet, args.species)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
