"""Lead capture: visit counting, lead recording and conversion tracking."""

from .counters import PageCounterUpdater, compute_conversion_rate
from .recorder import LeadRecorder
from .pipeline import LeadCapturePipeline, PageView, PageViewState

__all__ = [
    "PageCounterUpdater",
    "compute_conversion_rate",
    "LeadRecorder",
    "LeadCapturePipeline",
    "PageView",
    "PageViewState",
]
