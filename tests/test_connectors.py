"""Tests for the mock platform feeds."""

import datetime

import pytest

from adinsight.processor.connectors import (
    MOCK_BRANDS,
    MOCK_DEVICES,
    MOCK_SOURCES,
    mock_feed,
)


TODAY = datetime.date(2024, 6, 30)


class TestMockFeed:
    @pytest.mark.parametrize("source", sorted(MOCK_SOURCES))
    def test_row_count(self, source):
        rows = mock_feed(source, today=TODAY, seed=1)
        assert len(rows) == 60 * len(MOCK_DEVICES)

    def test_dates_count_back_from_today(self):
        rows = mock_feed("meta", days=5, today=TODAY, seed=1)
        dates = sorted({r.date for r in rows})
        assert dates == ["2024-06-26", "2024-06-27", "2024-06-28",
                         "2024-06-29", "2024-06-30"]
        assert rows[0].date == "2024-06-30"

    def test_fields(self):
        rows = mock_feed("google", days=3, today=TODAY, seed=7)
        for i, r in enumerate(rows):
            day = i // len(MOCK_DEVICES)
            assert r.channel == "google_ads"
            assert r.account == "GOOGLE_ACCOUNT_01"
            assert r.brand in MOCK_BRANDS
            assert r.device == MOCK_DEVICES[i % len(MOCK_DEVICES)]
            assert r.campaign_name == f"google_google_ads_{r.device}_Camp_{day}"

    def test_value_ranges(self):
        for r in mock_feed("tiktok", today=TODAY, seed=11):
            assert 1000 <= r.spend < 6000
            assert 0.5 * r.spend <= r.revenue < 5.5 * r.spend
            assert r.clicks == int(r.spend / 2)
            assert r.impressions == int(r.spend * 20)
            assert r.conversions == 0

    def test_seed_is_reproducible(self):
        a = mock_feed("meta", days=4, today=TODAY, seed=42)
        b = mock_feed("meta", days=4, today=TODAY, seed=42)
        assert a == b

    def test_different_seeds_differ(self):
        a = mock_feed("meta", days=4, today=TODAY, seed=1)
        b = mock_feed("meta", days=4, today=TODAY, seed=2)
        assert a != b

    def test_zero_days(self):
        assert mock_feed("meta", days=0, today=TODAY) == []

    def test_defaults_to_current_date(self):
        rows = mock_feed("meta", days=1, seed=0)
        assert rows[0].date == datetime.date.today().isoformat()

    def test_unknown_source(self):
        with pytest.raises(ValueError, match="Unknown mock source"):
            mock_feed("snapchat")
