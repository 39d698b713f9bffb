"""Dataset store - filtering, ranking and aggregation over loaded records.

Holds an immutable, file-ordered tuple of :class:`Record` objects and
answers every dashboard query as a pure function of (records, filters):

    <options>         distinct brand/account/channel/device values (full dataset)
    <filtered>        records passing the FilterState
    <table views>     all / top_impressions / bottom_impressions / top_clicks / top_roas
    <kpi>             KpiSnapshot over the filtered subset
    <time series>     spend and revenue per date
    <channel split>   one KpiSnapshot per configured channel group

Records are mirrored into a pandas DataFrame whose index is the record
position, so every pandas selection maps straight back to the original
Record objects.

Usage::

    store = DatasetStore(result.records)
    filters = store.default_filters()
    views = store.views(filters)
    print(views.kpi.roas)
"""

from dataclasses import dataclass

import pandas as pd

from adinsight.schema.columns import AnalysisConfig, build_default_config
from adinsight.schema.models import (
    ALL,
    RECORD_COLUMNS,
    ChannelBucket,
    DailyTotal,
    FilterState,
    KpiSnapshot,
    Record,
)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

TABLE_VIEWS = [
    "all", "top_impressions", "bottom_impressions", "top_clicks", "top_roas",
]

OPTION_DIMENSIONS = {
    "brands": "brand",
    "accounts": "account",
    "channels": "channel",
    "devices": "device",
}

_NUMERIC_COLUMNS = ["spend", "revenue", "clicks", "impressions", "conversions"]


# ---------------------------------------------------------------------------
# Frame helpers
# ---------------------------------------------------------------------------

def records_to_frame(records) -> pd.DataFrame:
    """Build a DataFrame with one row per record, indexed by position."""
    frame = pd.DataFrame([r.to_dict() for r in records], columns=RECORD_COLUMNS)
    frame[_NUMERIC_COLUMNS] = frame[_NUMERIC_COLUMNS].astype(float)
    return frame


def _safe_div(numerator, denominator) -> float:
    """Divide, returning 0 when the denominator is zero."""
    if not denominator:
        return 0.0
    return float(numerator) / float(denominator)


def compute_kpi(frame: pd.DataFrame) -> KpiSnapshot:
    """Sum the volume columns of *frame* and derive the ratios."""
    spend = float(frame["spend"].sum())
    revenue = float(frame["revenue"].sum())
    clicks = float(frame["clicks"].sum())
    impressions = float(frame["impressions"].sum())
    return KpiSnapshot(
        total_spend=spend,
        total_revenue=revenue,
        roas=_safe_div(revenue, spend),
        cpc=_safe_div(spend, clicks),
        ctr=_safe_div(clicks, impressions) * 100,
        total_clicks=clicks,
        total_impressions=impressions,
    )


def rank_by(frame: pd.DataFrame, column: str, limit: int,
            ascending: bool = False) -> pd.DataFrame:
    """Sort *frame* by *column* and keep the first *limit* rows.

    Stable sort, so ties keep file order.
    """
    return frame.sort_values(column, ascending=ascending, kind="mergesort").head(limit)


def rank_by_roas(frame: pd.DataFrame, min_spend: float, limit: int) -> pd.DataFrame:
    """Rows with spend above *min_spend*, best revenue/spend first."""
    eligible = frame[frame["spend"] > min_spend]
    ranked = eligible.assign(_roas=eligible["revenue"] / eligible["spend"])
    return rank_by(ranked, "_roas", limit).drop(columns="_roas")


def filter_mask(frame: pd.DataFrame, filters: FilterState) -> pd.Series:
    """Boolean mask of rows passing every active predicate in *filters*."""
    mask = pd.Series(True, index=frame.index, dtype=bool)
    if filters.start_date:
        mask &= frame["date"] >= filters.start_date
    if filters.end_date:
        mask &= frame["date"] <= filters.end_date
    if filters.brand != ALL:
        mask &= frame["brand"] == filters.brand
    if filters.account != ALL:
        mask &= frame["account"] == filters.account
    if filters.channels:
        mask &= frame["channel"].isin(filters.channels)
    if filters.devices:
        mask &= frame["device"].isin(filters.devices)
    return mask


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Views:
    """Every derived view for one (records, filters) pair."""
    filters: FilterState
    options: dict
    filtered: tuple
    tables: dict
    kpi: KpiSnapshot
    time_series: tuple
    channel_split: tuple

    def bucket(self, name: str) -> ChannelBucket | None:
        """Return the channel bucket called *name*, if configured."""
        for b in self.channel_split:
            if b.name == name:
                return b
        return None


# ---------------------------------------------------------------------------
# DatasetStore
# ---------------------------------------------------------------------------

class DatasetStore:
    """Read-only query surface over one loaded dataset.

    Args:
        records: Records in file order.  Stored as a tuple and never mutated.
        config: View limits, ROAS threshold and channel groups.
    """

    def __init__(self, records=(), config: AnalysisConfig | None = None):
        self.records: tuple[Record, ...] = tuple(records)
        self.config = config or build_default_config()
        self._frame = records_to_frame(self.records)

    def __len__(self) -> int:
        return len(self.records)

    @property
    def is_empty(self) -> bool:
        return not self.records

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _to_records(self, frame: pd.DataFrame) -> tuple[Record, ...]:
        return tuple(self.records[i] for i in frame.index)

    def _subset(self, filters: FilterState) -> pd.DataFrame:
        return self._frame[filter_mask(self._frame, filters)]

    def _tables(self, subset: pd.DataFrame, view: str) -> pd.DataFrame:
        cfg = self.config
        if view == "all":
            return subset.head(cfg.all_rows_limit)
        if view == "top_impressions":
            return rank_by(subset, "impressions", cfg.table_limit)
        if view == "bottom_impressions":
            return rank_by(subset, "impressions", cfg.table_limit, ascending=True)
        if view == "top_clicks":
            return rank_by(subset, "clicks", cfg.table_limit)
        if view == "top_roas":
            return rank_by_roas(subset, cfg.roas_min_spend, cfg.table_limit)
        raise ValueError(
            f"Unknown table view '{view}'. "
            f"Valid views: {', '.join(TABLE_VIEWS)}"
        )

    def _time_series(self, subset: pd.DataFrame) -> tuple[DailyTotal, ...]:
        grouped = subset.groupby("date", sort=True)[["spend", "revenue"]].sum()
        return tuple(
            DailyTotal(date=str(date), spend=float(row["spend"]),
                       revenue=float(row["revenue"]))
            for date, row in grouped.iterrows()
        )

    def _channel_split(self, subset: pd.DataFrame) -> tuple[ChannelBucket, ...]:
        buckets = []
        for group in self.config.channel_groups:
            mask = subset["channel"].map(group.matches).astype(bool)
            rows = subset[mask]
            buckets.append(ChannelBucket(
                name=group.name,
                kpi=compute_kpi(rows),
                count=len(rows),
                records=self._to_records(rows),
            ))
        return tuple(buckets)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def options(self) -> dict[str, list[str]]:
        """Distinct non-empty values per filterable dimension, sorted.

        Always computed over the full dataset so narrowing one filter never
        hides choices of another.
        """
        return {
            key: sorted({v for v in self._frame[column] if v})
            for key, column in OPTION_DIMENSIONS.items()
        }

    def filtered(self, filters: FilterState) -> tuple[Record, ...]:
        """Records passing *filters*, in file order."""
        return self._to_records(self._subset(filters))

    def table_view(self, filters: FilterState, view: str = "all") -> tuple[Record, ...]:
        """One of the sorted/truncated table slices of the filtered subset.

        Raises:
            ValueError: If *view* is not one of :data:`TABLE_VIEWS`.
        """
        return self._to_records(self._tables(self._subset(filters), view))

    def kpi(self, filters: FilterState) -> KpiSnapshot:
        return compute_kpi(self._subset(filters))

    def time_series(self, filters: FilterState) -> tuple[DailyTotal, ...]:
        """Spend and revenue per date, ascending by date string."""
        return self._time_series(self._subset(filters))

    def channel_split(self, filters: FilterState) -> tuple[ChannelBucket, ...]:
        """Per channel-group KPIs.  Rows matching no group are left out."""
        return self._channel_split(self._subset(filters))

    def default_filters(self) -> FilterState:
        """Filter defaults for a fresh load: the last window up to the max date."""
        return FilterState.default_for_dates(
            self._frame["date"], self.config.default_window_days
        )

    def views(self, filters: FilterState) -> Views:
        """Compute every view for *filters* in one pass over the subset."""
        subset = self._subset(filters)
        return Views(
            filters=filters,
            options=self.options(),
            filtered=self._to_records(subset),
            tables={v: self._to_records(self._tables(subset, v)) for v in TABLE_VIEWS},
            kpi=compute_kpi(subset),
            time_series=self._time_series(subset),
            channel_split=self._channel_split(subset),
        )


def compute_views(records, filters: FilterState,
                  config: AnalysisConfig | None = None) -> Views:
    """Pure entry point: every derived view of *records* under *filters*."""
    return DatasetStore(records, config).views(filters)
