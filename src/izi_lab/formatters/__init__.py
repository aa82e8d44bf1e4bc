"""Export formatters for session records.

Usage::

    from izi_lab.formatters import JSONFormatter

    js = JSONFormatter()
    json_bytes = js.format(session.records)
"""

from __future__ import annotations

from izi_lab.formatters.json_formatter import JSONFormatter
from izi_lab.formatters.protocols import IOutputFormatter

__all__ = ["IOutputFormatter", "JSONFormatter"]
