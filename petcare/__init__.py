"""Pet-care derived state.

This package turns stored pet-care records (pets, health records, vaccinations,
meal schedules and appointments) into read-only display state: ages,
vaccination and appointment statuses, next feeding times and health checks.
The storage engine stays outside; records arrive through a small protocol.
"""

__version__ = "0.1.0"
