"""Core data models - the contract between ingestion, the dataset store and export.

Defines the typed structure of a normalized campaign observation, the filter
state that parameterizes every dataset view, and the derived KPI containers.
All models are frozen: records are never mutated after ingestion and filter
states are replaced wholesale rather than edited in place.
"""

import datetime
from dataclasses import dataclass, field, replace
from typing import Any


ALL = "All"


# ---------------------------------------------------------------------------
# Record
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Record:
    """One campaign-day-channel-device observation."""
    date: str = ""
    brand: str = "Unknown Brand"
    account: str = "Unknown Account"
    channel: str = "Other"
    device: str = "Other"
    campaign_name: str = "Campaign"
    spend: float = 0.0
    revenue: float = 0.0
    clicks: float = 0.0
    impressions: float = 0.0
    conversions: float = 0.0  # reserved, never populated by the parser

    @property
    def roas(self) -> float:
        return self.revenue / self.spend if self.spend > 0 else 0.0

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "brand": self.brand,
            "account": self.account,
            "channel": self.channel,
            "device": self.device,
            "campaign_name": self.campaign_name,
            "spend": self.spend,
            "revenue": self.revenue,
            "clicks": self.clicks,
            "impressions": self.impressions,
            "conversions": self.conversions,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Record":
        return cls(
            date=d.get("date", ""),
            brand=d.get("brand", "Unknown Brand"),
            account=d.get("account", "Unknown Account"),
            channel=d.get("channel", "Other"),
            device=d.get("device", "Other"),
            campaign_name=d.get("campaign_name", "Campaign"),
            spend=float(d.get("spend", 0.0)),
            revenue=float(d.get("revenue", 0.0)),
            clicks=float(d.get("clicks", 0.0)),
            impressions=float(d.get("impressions", 0.0)),
            conversions=float(d.get("conversions", 0.0)),
        )


RECORD_COLUMNS = [
    "date", "brand", "account", "channel", "device", "campaign_name",
    "spend", "revenue", "clicks", "impressions", "conversions",
]


# ---------------------------------------------------------------------------
# Filter state
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FilterState:
    """Parameters shared by every dataset view.

    Date bounds are inclusive ISO strings; an empty string leaves that side
    unbounded.  ``brand`` / ``account`` take an exact value or the ``"All"``
    sentinel.  Empty ``channels`` / ``devices`` mean no restriction.
    """
    start_date: str = ""
    end_date: str = ""
    brand: str = ALL
    account: str = ALL
    channels: tuple[str, ...] = ()
    devices: tuple[str, ...] = ()

    def __post_init__(self):
        # Accept any iterable for the multi-selects but keep the state hashable.
        object.__setattr__(self, "channels", _as_tuple(self.channels))
        object.__setattr__(self, "devices", _as_tuple(self.devices))

    def replace(self, **changes) -> "FilterState":
        """Return a copy with *changes* applied."""
        return replace(self, **changes)

    def toggle_channel(self, value: str) -> "FilterState":
        return self.replace(channels=_toggle(self.channels, value))

    def toggle_device(self, value: str) -> "FilterState":
        return self.replace(devices=_toggle(self.devices, value))

    @classmethod
    def default_for_dates(cls, dates, window_days: int = 30) -> "FilterState":
        """Build the post-load defaults from the observed *dates*.

        The end bound is the maximum date; the start bound is *window_days*
        before it.  When the maximum date is not a valid ISO date the start
        bound stays open.  With no dates at all both bounds stay open.
        """
        max_date = max((d for d in dates if d), default="")
        if not max_date:
            return cls()
        try:
            end = datetime.date.fromisoformat(max_date[:10])
        except ValueError:
            return cls(end_date=max_date)
        start = end - datetime.timedelta(days=window_days)
        return cls(start_date=start.isoformat(), end_date=max_date)

    def to_dict(self) -> dict:
        return {
            "start_date": self.start_date,
            "end_date": self.end_date,
            "brand": self.brand,
            "account": self.account,
            "channels": list(self.channels),
            "devices": list(self.devices),
        }


def _as_tuple(values) -> tuple[str, ...]:
    if isinstance(values, str):
        return (values,)
    return tuple(values)


def _toggle(values: tuple[str, ...], value: str) -> tuple[str, ...]:
    if value in values:
        return tuple(v for v in values if v != value)
    return values + (value,)


# ---------------------------------------------------------------------------
# Derived results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class KpiSnapshot:
    """Aggregate KPIs over a set of records.  Ratios are 0 on zero denominators."""
    total_spend: float = 0.0
    total_revenue: float = 0.0
    roas: float = 0.0
    cpc: float = 0.0
    ctr: float = 0.0          # percentage points, e.g. 1.0 == 1%
    total_clicks: float = 0.0
    total_impressions: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalSpend": self.total_spend,
            "totalRevenue": self.total_revenue,
            "roas": self.roas,
            "cpc": self.cpc,
            "ctr": self.ctr,
            "totalClicks": self.total_clicks,
            "totalImpressions": self.total_impressions,
        }


@dataclass(frozen=True)
class DailyTotal:
    """Spend and revenue summed for one date."""
    date: str
    spend: float
    revenue: float

    def to_dict(self) -> dict:
        return {"date": self.date, "spend": self.spend, "revenue": self.revenue}


@dataclass(frozen=True)
class ChannelBucket:
    """Rows of one channel group with their own KPI snapshot."""
    name: str
    kpi: KpiSnapshot
    count: int
    records: tuple[Record, ...] = field(default=(), repr=False)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "count": self.count,
            "spend": self.kpi.total_spend,
            "revenue": self.kpi.total_revenue,
            "roas": self.kpi.roas,
            "kpi": self.kpi.to_dict(),
        }
