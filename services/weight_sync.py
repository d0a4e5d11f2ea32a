"""
Weight sync service: reads the latest Withings weight and forwards it to Strava.
"""
from typing import Optional

from clients.strava_client import StravaClient
from clients.withings_client import WithingsClient
from models.errors import StravaAPIError
from utils.date_utils import get_day_before_timestamp
from utils.logging_config import get_logger

logger = get_logger(__name__)


def get_and_format_weight(withings_client: WithingsClient, day_offset: int = 1,
                          timezone_str: str = 'UTC') -> str:
    """
    Fetch the latest weight and format it in kilograms.

    Args:
        withings_client: Configured Withings client
        day_offset: Days to look back; 1 is the current day, 2 the day prior
        timezone_str: Timezone used to compute the lookback window

    Returns:
        Weight in kilograms as a string, e.g. "72.5"
    """
    if day_offset < 1:
        raise ValueError(f"Day offset must be at least 1, got: {day_offset}")

    lastupdate = get_day_before_timestamp(day_offset, timezone_str)
    logger.debug(f"Fetching Withings weight updated since {lastupdate}")

    measurement = withings_client.get_weight_by_date(lastupdate)
    weight_in_kgs = measurement.format_kilograms()
    logger.info(f"Withings weight: {weight_in_kgs} kg")
    return weight_in_kgs


def sync_weight_to_strava(strava_client: StravaClient, weight_in_kgs: Optional[str]) -> str:
    """
    Update the Strava athlete's weight.

    Args:
        strava_client: Configured Strava client
        weight_in_kgs: Weight in kilograms

    Returns:
        HTTP status of the update

    Raises:
        StravaAPIError: If the weight is missing or the update fails
    """
    if not weight_in_kgs:
        raise StravaAPIError("Weight value is required")

    print("Syncing to Strava...")
    status = strava_client.update_athlete_weight(weight_in_kgs)
    logger.debug(f"Strava weight update status: {status}")
    print(f"Weight updated in Strava to {weight_in_kgs} kg")
    return status
