"""Export / sync formatter - handoff payloads for the narrative service.

Builds the plain-data artefacts handed to the external narrative/chat
service.  Nothing here performs I/O; callers decide how the payload is
delivered.

- ``build_sync_payload``      {brandName, report, rawCampaignData}
- ``build_csv_snapshot``      compact 9-column CSV of the most relevant rows
- ``build_summary_request``   KPI snapshot + filter description
- ``build_analysis_context``  report + top rows by spend for chat Q&A
"""

import json
import math

import pandas as pd

from adinsight.schema.columns import AnalysisConfig, build_default_config
from adinsight.schema.design_system import format_currency, format_ratio
from adinsight.schema.models import ALL, FilterState, KpiSnapshot

from .dataset import rank_by, rank_by_roas, records_to_frame


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

SYNC_CSV_HEADER = "date,brand,channel,device,campaign,spend,revenue,clicks,impressions"
OVERVIEW_LABEL = "Overview"
DATASET_LABEL = "Filtered dataset (CSV format)"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _format_number(value: float) -> str:
    """Render a count without a trailing ``.0``."""
    if value == int(value):
        return str(int(value))
    return repr(value)


def _csv_field(text: str) -> str:
    if any(ch in text for ch in ',"\n\r'):
        return '"' + text.replace('"', '""') + '"'
    return text


def describe_filters(filters: FilterState) -> dict:
    """Human-readable description of the active filters."""
    return {
        "startDate": filters.start_date,
        "endDate": filters.end_date,
        "dateRange": f"{filters.start_date} - {filters.end_date}",
        "brand": filters.brand,
        "account": filters.account,
        "channels": ", ".join(filters.channels) if filters.channels else ALL,
        "devices": ", ".join(filters.devices) if filters.devices else ALL,
    }


def fallback_report(filters: FilterState, kpi: KpiSnapshot) -> str:
    """Short report used when no narrative summary is available."""
    return (
        f"SUMMARY REPORT: {filters.start_date} - {filters.end_date}. "
        f"Spend: {format_currency(kpi.total_spend)}, "
        f"ROAS: {format_ratio(kpi.roas)}"
    )


# ---------------------------------------------------------------------------
# CSV snapshot
# ---------------------------------------------------------------------------

def select_sync_rows(filtered, config: AnalysisConfig | None = None) -> list:
    """Union of the top slices by spend, clicks, impressions and ROAS.

    Rows sharing a (campaign name, date) key are kept once; the first
    occurrence in slice order wins.
    """
    config = config or build_default_config()
    filtered = list(filtered)
    if not filtered:
        return []
    frame = records_to_frame(filtered)
    limit = config.export_slice_limit
    combined = pd.concat([
        rank_by(frame, "spend", limit),
        rank_by(frame, "clicks", limit),
        rank_by(frame, "impressions", limit),
        rank_by_roas(frame, config.roas_min_spend, limit),
    ])
    unique = combined.drop_duplicates(subset=["campaign_name", "date"], keep="first")
    return [filtered[i] for i in unique.index]


def build_csv_snapshot(records) -> str:
    """Serialize *records* in the 9-column sync format."""
    lines = [SYNC_CSV_HEADER]
    for r in records:
        lines.append(",".join([
            _csv_field(r.date),
            _csv_field(r.brand),
            _csv_field(r.channel),
            _csv_field(r.device),
            '"' + r.campaign_name.replace('"', '""') + '"',
            str(_round_half_up(r.spend)),
            str(_round_half_up(r.revenue)),
            _format_number(r.clicks),
            _format_number(r.impressions),
        ]))
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Payloads
# ---------------------------------------------------------------------------

def build_sync_payload(filtered, filters: FilterState, kpi: KpiSnapshot,
                       narrative_summary: str = "",
                       config: AnalysisConfig | None = None) -> dict:
    """Build the envelope pushed to the external chat bot.

    Args:
        filtered: The filtered subset (Records).
        filters: Active FilterState.
        kpi: KPI snapshot of *filtered*.
        narrative_summary: Generated summary text; the fallback report is
            used when empty.
    """
    rows = select_sync_rows(filtered, config)
    return {
        "brandName": filters.brand if filters.brand != ALL else OVERVIEW_LABEL,
        "report": narrative_summary or fallback_report(filters, kpi),
        "rawCampaignData": {
            "campaignName": DATASET_LABEL,
            "spend": kpi.total_spend,
            "revenue": kpi.total_revenue,
            "csvContent": build_csv_snapshot(rows),
        },
    }


def build_summary_request(kpi: KpiSnapshot, filters: FilterState) -> dict:
    """Inputs for the narrative summary: active filters and the KPI snapshot."""
    return {
        "filters": describe_filters(filters),
        "kpi": kpi.to_dict(),
    }


def build_analysis_context(filtered, filters: FilterState, report: str,
                           config: AnalysisConfig | None = None) -> dict:
    """Context shared with the chat assistant: report plus top rows by spend."""
    config = config or build_default_config()
    filtered = list(filtered)
    if filtered:
        frame = records_to_frame(filtered)
        top = rank_by(frame, "spend", config.context_row_limit)
        rows = [filtered[i].to_dict() for i in top.index]
    else:
        rows = []
    return {
        "report": report,
        "rawData": rows,
        "filters": filters.to_dict(),
    }


def payload_to_json(payload: dict) -> str:
    return json.dumps(payload, ensure_ascii=False, indent=2)
