import math
from datetime import date, datetime, time
from typing import Optional

CUTOFF_HOUR = 14
SECONDS_PER_DAY = 24 * 60 * 60


def parse_time(value: str) -> time:
    hour, minute = (int(part) for part in value.split(":"))
    return time(hour, minute)


def calculate_hire_duration(
    pickup_date: Optional[date],
    pickup_time: str,
    dropoff_date: Optional[date],
    dropoff_time: str,
) -> int:
    """Billable hire days between pickup and dropoff.

    A pickup at or after 2 PM does not consume its calendar day (-0.5) and a
    dropoff at or after 2 PM consumes an extra half day (+0.5). The result is
    rounded up and never below one day. A dropoff earlier than the pickup is
    not rejected here; it clamps to the one-day floor.
    """
    if not pickup_date or not dropoff_date:
        return 1

    pickup_at = parse_time(pickup_time)
    dropoff_at = parse_time(dropoff_time)
    pickup = datetime.combine(pickup_date, pickup_at)
    dropoff = datetime.combine(dropoff_date, dropoff_at)

    days = (dropoff - pickup).total_seconds() / SECONDS_PER_DAY

    if pickup_at.hour >= CUTOFF_HOUR:
        days -= 0.5
    if dropoff_at.hour >= CUTOFF_HOUR:
        days += 0.5

    return max(1, math.ceil(days))
