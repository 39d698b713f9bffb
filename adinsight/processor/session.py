"""Analysis session - the caller-owned state for one dashboard session.

Owns the current :class:`DatasetStore` and :class:`FilterState`.  Every
load replaces the dataset wholesale and resets the filters to the
defaults derived from the data; the filter state is then replaced by the
caller as the user interacts.  Views are recomputed in full whenever the
dataset or the filters change; the last result is kept so repeated reads
under the same filters are free.

Usage::

    session = AnalysisSession()
    session.load_file("export.csv")
    session.filters = session.filters.replace(brand="LCW")
    views = session.views
    payload = session.sync_payload(narrative_summary="...")
"""

from adinsight.schema.columns import AnalysisConfig, build_default_config
from adinsight.schema.models import FilterState

from .connectors import mock_feed
from .dataset import DatasetStore, Views
from .export import build_analysis_context, build_sync_payload, fallback_report
from .ingestion import IngestResult, ingest_text, read_campaign_file


class AnalysisSession:
    """Dataset + filter state holder with memoized views."""

    def __init__(self, config: AnalysisConfig | None = None):
        self.config = config or build_default_config()
        self.store = DatasetStore((), self.config)
        self._filters = FilterState()
        self._views: Views | None = None
        self.last_ingest: IngestResult | None = None

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_records(self, records) -> None:
        """Replace the dataset and reset the filters to data-derived defaults."""
        self.store = DatasetStore(records, self.config)
        self._filters = self.store.default_filters()
        self._views = None

    def load_text(self, text: str) -> IngestResult:
        result = ingest_text(text, self.config)
        self._finish_ingest(result)
        return result

    def load_file(self, path) -> IngestResult:
        result = read_campaign_file(path, self.config)
        self._finish_ingest(result)
        return result

    def load_mock(self, source: str, **kwargs) -> None:
        self.last_ingest = None
        self.load_records(mock_feed(source, **kwargs))

    def _finish_ingest(self, result: IngestResult) -> None:
        self.last_ingest = result
        self.load_records(result.records)

    @property
    def is_loaded(self) -> bool:
        return not self.store.is_empty

    # ------------------------------------------------------------------
    # Filters and views
    # ------------------------------------------------------------------

    @property
    def filters(self) -> FilterState:
        return self._filters

    @filters.setter
    def filters(self, value: FilterState) -> None:
        self._filters = value

    @property
    def views(self) -> Views:
        if self._views is None or self._views.filters != self._filters:
            self._views = self.store.views(self._filters)
        return self._views

    # ------------------------------------------------------------------
    # Handoff
    # ------------------------------------------------------------------

    def report(self, narrative_summary: str = "") -> str:
        return narrative_summary or fallback_report(self._filters, self.views.kpi)

    def sync_payload(self, narrative_summary: str = "") -> dict:
        views = self.views
        return build_sync_payload(views.filtered, self._filters, views.kpi,
                                  narrative_summary, self.config)

    def analysis_context(self, narrative_summary: str = "") -> dict:
        return build_analysis_context(self.views.filtered, self._filters,
                                      self.report(narrative_summary), self.config)
