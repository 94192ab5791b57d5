"""
app/validators package marker.
"""

from app.validators.schedule_validator import ScheduleValidator

__all__ = [
    "ScheduleValidator",
]
