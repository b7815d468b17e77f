"""Dashboard analytics."""

from .aggregator import DashboardAggregator, DailyStat, PageRanking

__all__ = ["DashboardAggregator", "DailyStat", "PageRanking"]
