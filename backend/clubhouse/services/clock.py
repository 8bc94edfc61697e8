"""Game clock: where the weekly schedule puts games relative to an instant.

Everything here is a pure function of ``(schedule, now)``. Callers that
need a fresh answer (the lifecycle ticker, each request) simply call again.
Calendar-day questions are answered with ``datetime.date`` values only;
elapsed-time questions with instants. The two are never mixed.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from .schedule import DAY_NAMES, Schedule


MONTH_NAMES = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun', 'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec']


@dataclass(frozen=True)
class GameOccurrence:
    date: datetime
    day_of_week: int
    location: Optional[str]
    formatted: str

    @property
    def date_key(self) -> str:
        """Calendar date of the game as ``YYYY-MM-DD``."""
        return self.date.date().isoformat()

    def to_dict(self) -> dict:
        return {
            'date': self.date.isoformat(),
            'date_key': self.date_key,
            'day_of_week': self.day_of_week,
            'location': self.location,
            'formatted': self.formatted,
        }


@dataclass(frozen=True)
class ClockReading:
    today: Optional[GameOccurrence]
    yesterday: Optional[GameOccurrence]
    next: Optional[GameOccurrence]


def club_now(tz_name: Optional[str] = None) -> datetime:
    """Wall-clock time in the club's timezone."""
    return datetime.now(ZoneInfo(tz_name or 'UTC'))


def day_of_week(day: date) -> int:
    # Python counts Monday as 0; schedules count Sunday as 0
    return (day.weekday() + 1) % 7


def elapsed_since(start: datetime, now: datetime) -> timedelta:
    if now.tzinfo is not None and start.tzinfo is not None:
        return now.astimezone(timezone.utc) - start.astimezone(timezone.utc)
    return now - start


def is_current_or_day_after(game: GameOccurrence, at: datetime) -> bool:
    game_day = game.date.date()
    return at.date() in (game_day, game_day + timedelta(days=1))


def format_game_datetime(when: datetime, now: datetime) -> str:
    today = now.date()
    if when.date() == today:
        label = 'Today'
    elif when.date() == today + timedelta(days=1):
        label = 'Tomorrow'
    else:
        label = f"{DAY_NAMES[day_of_week(when.date())]}, {MONTH_NAMES[when.month - 1]} {when.day}"
    hour = when.hour % 12 or 12
    suffix = 'AM' if when.hour < 12 else 'PM'
    return f"{label} at {hour}:{when.minute:02d} {suffix}"


def occurrence_on(schedule: Schedule, day: date, now: datetime) -> Optional[GameOccurrence]:
    """The scheduled game on calendar ``day``, if that weekday has one."""
    dow = day_of_week(day)
    kickoff = schedule.kickoff(dow)
    if kickoff is None:
        return None
    when = datetime.combine(day, kickoff, tzinfo=now.tzinfo)
    return GameOccurrence(
        date=when,
        day_of_week=dow,
        location=schedule.location(dow),
        formatted=format_game_datetime(when, now),
    )


def next_occurrence(schedule: Schedule, now: datetime) -> Optional[GameOccurrence]:
    """Earliest scheduled game strictly after ``now``.

    Looks at today and the following seven calendar days, so a single-day
    schedule whose game already kicked off today resolves to next week.
    """
    today = now.date()
    for offset in range(0, 8):
        game = occurrence_on(schedule, today + timedelta(days=offset), now)
        if game is not None and elapsed_since(game.date, now) < timedelta(0):
            return game
    return None


def evaluate(schedule: Schedule, now: datetime) -> ClockReading:
    today = now.date()
    return ClockReading(
        today=occurrence_on(schedule, today, now),
        yesterday=occurrence_on(schedule, today - timedelta(days=1), now),
        next=next_occurrence(schedule, now),
    )
