# core/trace.py

"""
Per-call diagnostics collector.

Stages narrate their decisions into a Trace instead of printing. The engine
creates one Trace per analyze() call and freezes it into the result, so
tests can assert on decisions without capturing log output.
"""

from __future__ import annotations
from typing import Any, List, Optional, Tuple

import logging

from .models import TraceEntry

logger = logging.getLogger(__name__)


class Trace:
    def __init__(self) -> None:
        self._entries: List[TraceEntry] = []

    def add(self, stage: str, message: str, **data: Any) -> None:
        self._entries.append(TraceEntry(stage=stage, message=message, data=dict(data)))
        logger.debug("[%s] %s %s", stage, message, data if data else "")

    def entries(self) -> Tuple[TraceEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


def record(trace: Optional[Trace], stage: str, message: str, **data: Any) -> None:
    """Add to ``trace`` when one was supplied; stages accept ``trace=None``."""
    if trace is not None:
        trace.add(stage, message, **data)
    else:
        logger.debug("[%s] %s", stage, message)
