"""Mock platform connectors.

Generates realistic-looking daily campaign rows for a single ad platform
so the dashboard can be exercised without an export file.  Each source
yields ``days`` x devices rows per channel, dated backwards from ``today``.
"""

import datetime
import math
import random

from adinsight.schema.models import Record


MOCK_SOURCES = {
    "meta": ["meta"],
    "google": ["google_ads"],
    "tiktok": ["tiktok"],
}

MOCK_BRANDS = ["LCW", "LCW Home", "LCW Kids"]
MOCK_DEVICES = ["MOBILE", "DESKTOP", "APP"]


def mock_feed(source: str, days: int = 60, today: datetime.date | None = None,
              seed: int | None = None) -> list[Record]:
    """Build mock records for *source*.

    Args:
        source: One of 'meta', 'google', 'tiktok'.
        days: Number of days to generate, ending at *today*.
        today: Last date of the feed (default: the current date).
        seed: Seed for reproducible values.

    Raises:
        ValueError: If source is not recognized.
    """
    if source not in MOCK_SOURCES:
        raise ValueError(
            f"Unknown mock source '{source}'. "
            f"Valid sources: {', '.join(sorted(MOCK_SOURCES))}"
        )
    rng = random.Random(seed)
    today = today or datetime.date.today()
    account = f"{source.upper()}_ACCOUNT_01"

    rows = []
    for i in range(days):
        date_str = (today - datetime.timedelta(days=i)).isoformat()
        for channel in MOCK_SOURCES[source]:
            for device in MOCK_DEVICES:
                spend = rng.random() * 5000 + 1000
                rows.append(Record(
                    date=date_str,
                    brand=rng.choice(MOCK_BRANDS),
                    account=account,
                    channel=channel,
                    device=device,
                    campaign_name=f"{source}_{channel}_{device}_Camp_{i}",
                    spend=spend,
                    revenue=spend * (rng.random() * 5 + 0.5),
                    clicks=float(math.floor(spend / 2)),
                    impressions=float(math.floor(spend * 20)),
                ))
    return rows
