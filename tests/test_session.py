"""Tests for AnalysisSession - load, filter, view and handoff flow."""

import datetime

import pytest

from adinsight.processor.ingestion import NoDataError
from adinsight.processor.session import AnalysisSession
from adinsight.schema.models import FilterState, Record


EXPORT = (
    "tarih;co_marka;hesap_adi;platform;cihaz;kampanya_adi;harcama;donusum;tiklama;gosterim\n"
    "2024-01-01;LCW;A1;Meta;MOBILE;Camp A;1.000,00;5.000,00;100;10000\n"
    "2024-01-02;LCW;A1;Google Ads;DESKTOP;Camp B;2.000,00;1.000,00;50;5000\n"
)

OTHER_EXPORT = (
    "date,brand,account,platform,device,campaign,spend,revenue,clicks,impressions\n"
    "2024-03-10,LCW Kids,B1,tiktok,APP,Spring,300,900,30,3000\n"
)


@pytest.fixture
def session():
    s = AnalysisSession()
    s.load_text(EXPORT)
    return s


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

class TestLoading:
    def test_fresh_session_is_empty(self):
        s = AnalysisSession()
        assert not s.is_loaded
        assert s.filters == FilterState()
        assert s.views.filtered == ()

    def test_load_text(self, session):
        assert session.is_loaded
        assert len(session.store) == 2
        assert session.last_ingest.delimiter == ";"
        assert session.last_ingest.warnings == []

    def test_defaults_after_load(self, session):
        f = session.filters
        assert f.end_date == "2024-01-02"
        assert f.start_date == "2023-12-03"
        assert f.brand == "All"
        assert f.channels == ()

    def test_reload_replaces_dataset_and_resets_filters(self, session):
        session.filters = session.filters.replace(brand="LCW")
        session.load_text(OTHER_EXPORT)
        assert [r.campaign_name for r in session.store.records] == ["Spring"]
        assert session.filters.brand == "All"
        assert session.filters.end_date == "2024-03-10"
        assert session.views.kpi.total_spend == pytest.approx(300)

    def test_no_data_keeps_previous_dataset(self, session):
        before = session.store
        filters = session.filters
        with pytest.raises(NoDataError):
            session.load_text("tarih;harcama\n")
        assert session.store is before
        assert session.filters == filters

    def test_load_file(self, tmp_path):
        path = tmp_path / "export.csv"
        path.write_text(EXPORT, encoding="utf-8")
        s = AnalysisSession()
        result = s.load_file(path)
        assert len(result.records) == 2
        assert s.last_ingest is result
        assert s.views.kpi.total_revenue == pytest.approx(6000)

    def test_load_records(self):
        s = AnalysisSession()
        s.load_records([Record(date="2024-02-01", spend=10)])
        assert s.filters.end_date == "2024-02-01"
        assert s.views.kpi.total_spend == 10

    def test_load_mock(self, session):
        session.load_mock("meta", days=10, today=datetime.date(2024, 3, 1), seed=3)
        assert len(session.store) == 30
        assert session.last_ingest is None
        assert session.filters.end_date == "2024-03-01"
        assert session.filters.start_date == "2024-01-31"


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------

class TestViews:
    def test_end_to_end_kpis(self, session):
        views = session.views
        assert len(views.filtered) == 2
        assert views.kpi.total_spend == pytest.approx(3000)
        assert views.kpi.total_revenue == pytest.approx(6000)
        assert views.kpi.roas == pytest.approx(2.0)

    def test_end_to_end_channel_split(self, session):
        views = session.views
        assert views.bucket("meta").kpi.roas == pytest.approx(5.0)
        assert views.bucket("google").kpi.roas == pytest.approx(0.5)

    def test_end_to_end_time_series(self, session):
        series = session.views.time_series
        assert [p.date for p in series] == ["2024-01-01", "2024-01-02"]
        assert series[0].spend == pytest.approx(1000)

    def test_platform_device_export(self):
        s = AnalysisSession()
        s.load_text("platform,device,tarih,harcama,donusum,tiklama,gosterim\n"
                    "meta,MOBILE,2024-01-01,1000,5000,100,10000\n"
                    "google_ads,DESKTOP,2024-01-02,2000,1000,50,20000\n")
        views = s.views
        assert len(views.filtered) == 2
        assert views.kpi.total_spend == pytest.approx(3000)
        assert views.kpi.total_revenue == pytest.approx(6000)
        assert views.kpi.roas == pytest.approx(2.0)
        assert views.bucket("meta").kpi.roas == pytest.approx(5.0)
        assert views.bucket("google").kpi.roas == pytest.approx(0.5)
        assert s.last_ingest.missing_fields == ["brand", "account", "campaign"]
        assert views.filtered[0].brand == "Unknown Brand"

    def test_memoized_while_filters_unchanged(self, session):
        first = session.views
        assert session.views is first
        session.filters = session.filters.replace()
        assert session.views is first

    def test_recomputed_on_filter_change(self, session):
        first = session.views
        session.filters = session.filters.toggle_channel("Meta")
        second = session.views
        assert second is not first
        assert [r.campaign_name for r in second.filtered] == ["Camp A"]
        assert second.kpi.roas == pytest.approx(5.0)

    def test_toggle_twice_restores(self, session):
        session.filters = session.filters.toggle_device("APP").toggle_device("APP")
        assert session.filters.devices == ()
        assert len(session.views.filtered) == 2

    def test_date_filter(self, session):
        session.filters = session.filters.replace(start_date="2024-01-02")
        assert [r.campaign_name for r in session.views.filtered] == ["Camp B"]

    def test_options_unaffected_by_filters(self, session):
        session.filters = session.filters.replace(channels=("Meta",))
        assert session.views.options["channels"] == ["Google Ads", "Meta"]


# ---------------------------------------------------------------------------
# Handoff
# ---------------------------------------------------------------------------

class TestHandoff:
    def test_report_fallback(self, session):
        assert session.report() == (
            "SUMMARY REPORT: 2023-12-03 - 2024-01-02. Spend: 3,000 TL, ROAS: 2.00x"
        )

    def test_report_prefers_narrative(self, session):
        assert session.report("Narrative") == "Narrative"

    def test_sync_payload(self, session):
        payload = session.sync_payload()
        assert payload["brandName"] == "Overview"
        assert payload["report"] == session.report()
        lines = payload["rawCampaignData"]["csvContent"].split("\n")
        assert len(lines) == 3
        assert lines[1] == '2024-01-02,LCW,Google Ads,DESKTOP,"Camp B",2000,1000,50,5000'
        assert lines[2] == '2024-01-01,LCW,Meta,MOBILE,"Camp A",1000,5000,100,10000'

    def test_sync_payload_for_brand(self, session):
        session.filters = session.filters.replace(brand="LCW")
        assert session.sync_payload("Text")["brandName"] == "LCW"

    def test_analysis_context(self, session):
        ctx = session.analysis_context()
        assert ctx["report"] == session.report()
        assert [row["campaign_name"] for row in ctx["rawData"]] == ["Camp B", "Camp A"]
        assert ctx["filters"]["end_date"] == "2024-01-02"
