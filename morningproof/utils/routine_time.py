"""
Time predicates for the morning routine.

All functions take an aware `now` in the user's local timezone and a
cutoff expressed as minutes from local midnight.
"""

from datetime import datetime, time, timedelta


def minutes_since_midnight(now: datetime) -> int:
    return now.hour * 60 + now.minute


def local_datetime_at(now: datetime, minutes: int, day_offset: int = 0) -> datetime:
    """The local datetime `minutes` after midnight on now's date (+ day_offset days)"""
    target_date = now.date() + timedelta(days=day_offset)
    naive = datetime.combine(target_date, time(minutes // 60, minutes % 60))
    tz = now.tzinfo
    if tz is None:
        return naive
    if hasattr(tz, "localize"):
        # pytz zones need localize() to pick the right UTC offset for the date
        return tz.localize(naive.replace(tzinfo=None))
    return naive.replace(tzinfo=tz)


def cutoff_datetime(now: datetime, cutoff_minutes: int) -> datetime:
    return local_datetime_at(now, cutoff_minutes)


def is_past_cutoff(now: datetime, cutoff_minutes: int) -> bool:
    return now > cutoff_datetime(now, cutoff_minutes)


def seconds_until_cutoff(now: datetime, cutoff_minutes: int) -> float:
    """Seconds left before today's cutoff, never negative"""
    return max(0.0, (cutoff_datetime(now, cutoff_minutes) - now).total_seconds())


def seconds_until_next_deadline(now: datetime, cutoff_minutes: int) -> float:
    """Seconds until the next cutoff, rolling over to tomorrow once today's has passed"""
    deadline = cutoff_datetime(now, cutoff_minutes)
    if deadline <= now:
        deadline = local_datetime_at(now, cutoff_minutes, day_offset=1)
    return (deadline - now).total_seconds()


def is_day_locked(now: datetime, cutoff_minutes: int, all_habits_completed: bool) -> bool:
    """A day is locked once the cutoff has passed without every enabled habit done"""
    return is_past_cutoff(now, cutoff_minutes) and not all_habits_completed


def format_time_remaining(seconds: float) -> str:
    """Short countdown label such as "1h 05m" or "12m\""""
    total_minutes = int(seconds // 60)
    hours, minutes = divmod(total_minutes, 60)
    if hours > 0:
        return f"{hours}h {minutes:02d}m"
    return f"{minutes}m"
