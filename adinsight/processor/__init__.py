"""Data processor module for Ad Insight."""

from .connectors import (
    MOCK_SOURCES,
    mock_feed,
)
from .dataset import (
    TABLE_VIEWS,
    DatasetStore,
    Views,
    compute_kpi,
    compute_views,
)
from .export import (
    build_analysis_context,
    build_csv_snapshot,
    build_summary_request,
    build_sync_payload,
    describe_filters,
    fallback_report,
)
from .ingestion import (
    IngestResult,
    NoDataError,
    detect_delimiter,
    detect_encoding,
    ingest_text,
    normalize_rows,
    parse_locale_number,
    read_campaign_file,
    resolve_columns,
    split_line,
)
from .session import AnalysisSession
