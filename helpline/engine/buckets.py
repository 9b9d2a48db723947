"""
helpline.engine.buckets — Time bucket generation
=================================================
"""

from __future__ import annotations

import logging
from datetime import datetime

from helpline.engine.dates import UnsupportedGranularity, advance, round_up

logger = logging.getLogger(__name__)

__all__ = ["generate_buckets"]


def generate_buckets(unit: str, start: datetime, end: datetime) -> list[datetime]:
    """List the bucket start instants covering ``[start, end]`` at *unit* width.

    *start* is first rounded up to a *unit* boundary, so a weekly range
    beginning on a Saturday starts on the following Monday.  Every element
    is ``<= end``; the list is empty when the rounded start is past *end*.

    An unsupported *unit* never raises: rounding is skipped and generation
    stops at the first failed step, returning whatever was collected.
    """
    try:
        current = round_up(unit, start)
    except UnsupportedGranularity:
        logger.warning("Cannot round %s to unit %r; using it as-is", start, unit)
        current = start

    buckets: list[datetime] = []
    while current <= end:
        buckets.append(current)
        try:
            current = advance(unit, current)
        except UnsupportedGranularity:
            logger.warning("Stopped bucket generation at %s: unsupported unit %r", current, unit)
            break
    return buckets
