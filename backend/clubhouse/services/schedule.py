from dataclasses import dataclass, field
from datetime import time
import re
from typing import Dict, Mapping, Optional

from clubhouse.errors import InvalidScheduleError


DAY_NAMES = ['Sunday', 'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday']

_TIME_RE = re.compile(r'^(\d{1,2}):(\d{2})$')


@dataclass(frozen=True)
class Schedule:
    """Weekly recurring schedule.

    ``days`` maps day of week (0 = Sunday .. 6 = Saturday) to kick-off time
    as ``HH:MM``; ``locations`` optionally maps the same days to a venue.
    """
    days: Dict[int, str] = field(default_factory=dict)
    locations: Dict[int, str] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> 'Schedule':
        return cls()

    @classmethod
    def from_document(cls, document: Optional[Mapping]) -> 'Schedule':
        """Parse the stored ``{days, locations}`` shape. Keys may be strings."""
        if not document:
            return cls.empty()
        if not isinstance(document, Mapping):
            raise InvalidScheduleError("Schedule must be an object with 'days' and 'locations'")
        days = _day_map(document.get('days'), 'days')
        locations = {k: v for k, v in _day_map(document.get('locations'), 'locations').items() if v}
        return cls(days=days, locations=locations)

    def to_document(self) -> dict:
        return {
            'days': {str(d): t for d, t in sorted(self.days.items())},
            'locations': {str(d): loc for d, loc in sorted(self.locations.items())},
        }

    def kickoff(self, day_of_week: int) -> Optional[time]:
        value = self.days.get(day_of_week)
        if value is None:
            return None
        return parse_time(value)

    def location(self, day_of_week: int) -> Optional[str]:
        return self.locations.get(day_of_week) or None


def _day_map(value, label: str) -> Dict[int, object]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise InvalidScheduleError(f"Schedule '{label}' must map day of week to a value")
    return {_parse_day(k): v for k, v in value.items()}


def _parse_day(key) -> int:
    try:
        day = int(key)
    except (TypeError, ValueError):
        raise InvalidScheduleError(f"Invalid day of week: {key!r}")
    if not 0 <= day <= 6:
        raise InvalidScheduleError(f"Day of week must be between 0 and 6, got {day}")
    return day


def parse_time(value: str) -> time:
    match = _TIME_RE.match(value) if isinstance(value, str) else None
    if not match:
        raise InvalidScheduleError(f"Invalid time {value!r}; expected HH:MM")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise InvalidScheduleError(f"Invalid time {value!r}; expected HH:MM")
    return time(hours, minutes)


def validate(schedule: Schedule) -> Schedule:
    """Return the schedule unchanged or raise InvalidScheduleError."""
    if not schedule.days:
        raise InvalidScheduleError('Schedule must contain at least one game day')
    for day, value in schedule.days.items():
        _parse_day(day)
        parse_time(value)
    for day, location in schedule.locations.items():
        if day not in schedule.days:
            raise InvalidScheduleError(f"Location set for {DAY_NAMES[_parse_day(day)]}, which has no game")
        if not isinstance(location, str):
            raise InvalidScheduleError(f"Location for {DAY_NAMES[day]} must be text")
    return schedule


def load_schedule() -> Schedule:
    """Current schedule from storage, or the empty schedule if none was saved."""
    from clubhouse import db
    from clubhouse.models import ScheduleConfig
    config = db.session.get(ScheduleConfig, 1)
    if not config:
        return Schedule.empty()
    return Schedule.from_document(config.get_document())


def save_schedule(schedule: Schedule, updated_by: Optional[int] = None) -> Schedule:
    """Validate and replace the stored schedule wholesale."""
    from clubhouse import db
    from clubhouse.models import ScheduleConfig
    validate(schedule)
    config = db.session.get(ScheduleConfig, 1) or ScheduleConfig(id=1)
    config.set_document(schedule.to_document())
    config.updated_by = updated_by
    db.session.add(config)
    db.session.commit()
    return schedule
