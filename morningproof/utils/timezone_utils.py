import logging
import pytz
from datetime import datetime

logger = logging.getLogger(__name__)

# Handle timezone abbreviations by mapping them to proper pytz names
TIMEZONE_MAPPING = {
    'PDT': 'America/Los_Angeles',
    'PST': 'America/Los_Angeles',
    'EDT': 'America/New_York',
    'EST': 'America/New_York',
    'CDT': 'America/Chicago',
    'CST': 'America/Chicago',
    'MDT': 'America/Denver',
    'MST': 'America/Denver',
}


def normalize_timezone(timezone: str) -> str:
    """Map abbreviations to pytz names and fall back to UTC for unknown zones"""
    if not timezone:
        return "UTC"

    if timezone in TIMEZONE_MAPPING:
        timezone = TIMEZONE_MAPPING[timezone]

    try:
        pytz.timezone(timezone)
        return timezone
    except pytz.exceptions.UnknownTimeZoneError:
        logger.warning(f"Unknown timezone: {timezone}, falling back to UTC")
        return "UTC"


def get_user_now(user_timezone: str) -> datetime:
    """Current time as an aware datetime in the user's timezone"""
    tz = pytz.timezone(normalize_timezone(user_timezone))
    return datetime.now(tz)
