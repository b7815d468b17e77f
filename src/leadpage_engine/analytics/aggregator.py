"""Dashboard analytics over stored pages and leads."""

from collections import defaultdict
from dataclasses import dataclass, asdict
from datetime import datetime, date, time, timedelta, tzinfo
from typing import Dict, List, Optional

from ..storage.models import LandingPage

DEFAULT_WINDOW_DAYS = 7
TOP_PAGES_LIMIT = 5


@dataclass
class DailyStat:
    """Visits and conversions for one local calendar day."""
    day: date
    visits: int = 0
    conversions: int = 0

    @property
    def label(self) -> str:
        return self.day.strftime("%d/%m")

    @property
    def conversion_rate(self) -> float:
        return round(self.conversions / max(self.visits, 1) * 100, 1)

    def to_dict(self) -> Dict:
        return {
            "date": self.label,
            "day": self.day.isoformat(),
            "visits": self.visits,
            "conversions": self.conversions,
            "conversion_rate": self.conversion_rate,
        }


@dataclass
class PageRanking:
    title: str
    visits: int

    def to_dict(self) -> Dict:
        return asdict(self)


class DashboardAggregator:
    """Read-only rollups for an owner's dashboard.

    Visit totals come from the page counters, which may under-report under
    concurrent traffic; no reconciliation is attempted.
    """

    def __init__(self, store, days: int = DEFAULT_WINDOW_DAYS, tz: Optional[tzinfo] = None):
        if days < 1:
            raise ValueError("days must be at least 1")
        self.store = store
        self.days = days
        self.tz = tz

    def _local_tz(self, now: datetime) -> tzinfo:
        if self.tz is not None:
            return self.tz
        return now.astimezone().tzinfo

    def _now(self, now: Optional[datetime]) -> datetime:
        now = now or datetime.now().astimezone()
        if now.tzinfo is None:
            now = now.astimezone()
        return now.astimezone(self._local_tz(now))

    def daily_stats(self, user_id: str, now: Optional[datetime] = None) -> List[DailyStat]:
        """One point per local day in the trailing window, oldest first.

        ``conversions`` counts leads created that day. ``visits`` sums the
        visit counters of pages last updated that day.
        """
        now = self._now(now)
        tz = now.tzinfo
        today = now.date()
        days = [today - timedelta(days=i) for i in range(self.days - 1, -1, -1)]
        stats = {d: DailyStat(day=d) for d in days}

        window_start = datetime.combine(days[0], time.min, tzinfo=tz)

        for lead in self.store.list_leads_since(user_id, window_start):
            day = lead.created_at.astimezone(tz).date()
            if day in stats:
                stats[day].conversions += 1

        for page in self.store.list_pages(user_id):
            day = page.updated_at.astimezone(tz).date()
            if day in stats:
                stats[day].visits += page.visits or 0

        return [stats[d] for d in days]

    def top_pages(self, user_id: str, limit: int = TOP_PAGES_LIMIT) -> List[PageRanking]:
        """Pages with the most visits, for the distribution chart."""
        pages = self.store.list_pages(user_id, order_by="visits")
        ranked = sorted(pages, key=lambda p: p.visits or 0, reverse=True)[:limit]
        return [PageRanking(title=p.title, visits=p.visits or 0) for p in ranked]

    def leads_by_source(self, user_id: str, now: Optional[datetime] = None) -> Dict[str, int]:
        """Lead counts per attribution source within the window."""
        now = self._now(now)
        start = datetime.combine(
            now.date() - timedelta(days=self.days - 1), time.min, tzinfo=now.tzinfo
        )
        sources = defaultdict(int)
        for lead in self.store.list_leads_since(user_id, start):
            sources[lead.source or "direct"] += 1
        return dict(sorted(sources.items(), key=lambda item: item[1], reverse=True))

    def summary(self, user_id: str) -> Dict:
        """Totals across all of the owner's pages."""
        pages: List[LandingPage] = self.store.list_pages(user_id, order_by="visits")

        total_visits = sum(p.visits or 0 for p in pages)
        total_conversions = sum(p.conversions or 0 for p in pages)
        overall_rate = round(total_conversions / total_visits * 100, 2) if total_visits > 0 else 0

        return {
            "total_pages": len(pages),
            "published_pages": sum(1 for p in pages if p.is_published),
            "total_visits": total_visits,
            "total_conversions": total_conversions,
            "conversion_rate": overall_rate,
            "pages": [
                {
                    "id": p.id,
                    "title": p.title,
                    "status": p.status.value,
                    "visits": p.visits or 0,
                    "conversions": p.conversions or 0,
                    "conversion_rate": round((p.conversions or 0) / max(p.visits or 0, 1) * 100, 1),
                }
                for p in pages
            ],
        }

    def dashboard(self, user_id: str, now: Optional[datetime] = None) -> Dict:
        """Everything the dashboard view renders, in one payload."""
        return {
            "summary": self.summary(user_id),
            "daily": [s.to_dict() for s in self.daily_stats(user_id, now)],
            "top_pages": [p.to_dict() for p in self.top_pages(user_id)],
            "leads_by_source": self.leads_by_source(user_id, now),
        }
