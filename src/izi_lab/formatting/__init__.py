"""Clinical-note text rendering."""

from __future__ import annotations

from izi_lab.formatting.summary import SummaryFormatter, today_label

__all__ = ["SummaryFormatter", "today_label"]
