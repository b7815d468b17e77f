"""Tests for dashboard analytics."""

import pytest
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

from leadpage_engine.analytics import DashboardAggregator
from leadpage_engine.storage import PageDatabase, PageStatus


@pytest.fixture
def temp_data_dir():
    """Create temporary data directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def db(temp_data_dir):
    return PageDatabase(temp_data_dir / "pages.db")


@pytest.fixture
def aggregator(db):
    return DashboardAggregator(db, tz=timezone.utc)


def add_page(db, title, visits=0, conversions=0, user_id="u1", published=True):
    page = db.create_page(user_id=user_id, title=title)
    if published:
        db.set_page_status(page.id, PageStatus.PUBLISHED)
    if visits or conversions:
        rate = round(conversions / max(visits, 1) * 100, 2)
        db.update_page_counters(page.id, visits=visits, conversions=conversions, conversion_rate=rate)
    return db.get_page(page.id)


class TestDailyStats:

    def test_seven_points_oldest_first(self, aggregator):
        now = datetime.now(timezone.utc)
        stats = aggregator.daily_stats("u1", now=now)

        assert len(stats) == 7
        assert stats[-1].day == now.date()
        assert stats[0].day == now.date() - timedelta(days=6)
        assert all(s.visits == 0 and s.conversions == 0 for s in stats)

    def test_counts_leads_per_day(self, db, aggregator):
        now = datetime.now(timezone.utc)
        page = add_page(db, "A")
        db.insert_lead(page.id, [], {}, created_at=now)
        db.insert_lead(page.id, [], {}, created_at=now)
        db.insert_lead(page.id, [], {}, created_at=now - timedelta(days=2))
        db.insert_lead(page.id, [], {}, created_at=now - timedelta(days=10))

        stats = aggregator.daily_stats("u1", now=now)

        assert stats[-1].conversions == 2
        assert stats[-3].conversions == 1
        assert sum(s.conversions for s in stats) == 3

    def test_visits_from_pages_updated_that_day(self, db, aggregator):
        add_page(db, "A", visits=30)
        add_page(db, "B", visits=12)
        add_page(db, "Other", visits=99, user_id="u2")

        stats = aggregator.daily_stats("u1", now=datetime.now(timezone.utc))

        assert stats[-1].visits == 42
        assert sum(s.visits for s in stats[:-1]) == 0

    def test_label_format(self, aggregator):
        now = datetime(2026, 3, 9, 12, 0, tzinfo=timezone.utc)
        stats = aggregator.daily_stats("u1", now=now)
        assert stats[-1].label == "09/03"
        assert stats[-1].to_dict()["date"] == "09/03"

    def test_local_day_boundaries(self, db):
        """A lead at 23:30 UTC belongs to the next day three hours east."""
        tz = timezone(timedelta(hours=3))
        page = add_page(db, "A")
        created = datetime(2026, 3, 9, 23, 30, tzinfo=timezone.utc)
        db.insert_lead(page.id, [], {}, created_at=created)

        stats = DashboardAggregator(db, tz=tz).daily_stats(
            "u1", now=datetime(2026, 3, 10, 12, 0, tzinfo=tz)
        )
        assert stats[-1].conversions == 1

    def test_custom_window(self, db):
        stats = DashboardAggregator(db, days=30, tz=timezone.utc).daily_stats("u1")
        assert len(stats) == 30

    def test_invalid_window(self, db):
        with pytest.raises(ValueError):
            DashboardAggregator(db, days=0)


class TestTopPages:

    def test_top_five_by_visits(self, db, aggregator):
        for i, visits in enumerate([5, 50, 20, 0, 100, 7, 1]):
            add_page(db, f"P{i}", visits=visits)

        top = aggregator.top_pages("u1")

        assert [(p.title, p.visits) for p in top] == [
            ("P4", 100), ("P1", 50), ("P2", 20), ("P5", 7), ("P0", 5),
        ]


class TestSummary:

    def test_totals(self, db, aggregator):
        add_page(db, "A", visits=10, conversions=3)
        add_page(db, "B", visits=30, conversions=1)
        add_page(db, "Draft", published=False)

        summary = aggregator.summary("u1")

        assert summary["total_pages"] == 3
        assert summary["published_pages"] == 2
        assert summary["total_visits"] == 40
        assert summary["total_conversions"] == 4
        assert summary["conversion_rate"] == 10.0
        rates = {p["title"]: p["conversion_rate"] for p in summary["pages"]}
        assert rates == {"A": 30.0, "B": 3.3, "Draft": 0.0}

    def test_no_visits(self, aggregator):
        summary = aggregator.summary("u1")
        assert summary["conversion_rate"] == 0
        assert summary["pages"] == []

    def test_leads_by_source(self, db, aggregator):
        from leadpage_engine.storage import VisitContext

        page = add_page(db, "A")
        db.insert_lead(page.id, [], {}, VisitContext(utm_source="google"))
        db.insert_lead(page.id, [], {}, VisitContext(utm_source="google"))
        db.insert_lead(page.id, [], {})

        assert aggregator.leads_by_source("u1") == {"google": 2, "direct": 1}

    def test_dashboard_payload(self, db, aggregator):
        add_page(db, "A", visits=4, conversions=1)
        payload = aggregator.dashboard("u1")
        assert set(payload) == {"summary", "daily", "top_pages", "leads_by_source"}
        assert payload["top_pages"] == [{"title": "A", "visits": 4}]
