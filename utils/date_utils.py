"""
Date helpers for building Withings query windows.
"""
from datetime import datetime, timedelta

import pytz


def get_day_before_timestamp(days: int, timezone_str: str = 'UTC') -> str:
    """
    Unix timestamp for the current time minus a number of days.

    Args:
        days: Number of days to subtract from now
        timezone_str: Timezone the current time is taken in

    Returns:
        Epoch seconds as a string
    """
    tz = pytz.timezone(timezone_str)
    current_time = datetime.now(tz)
    day_before = current_time - timedelta(days=days)
    return str(int(day_before.timestamp()))
