from __future__ import annotations

from datetime import datetime


def format_datetime(now: datetime | None = None) -> str:
    """Render a roster timestamp as ``D/M/YYYY, h:MM:SS am|pm`` on the local clock."""
    current = now or datetime.now()
    hours = current.hour % 12 or 12
    meridiem = "pm" if current.hour >= 12 else "am"
    return (
        f"{current.day}/{current.month}/{current.year}, "
        f"{hours}:{current.minute:02d}:{current.second:02d} {meridiem}"
    )
