"""Ordering, grouping and formatting helpers for session histories."""

import re
from collections import defaultdict
from datetime import datetime
from typing import Dict, Iterable, List, Tuple

from ..schemas.records import SessionRecord

SECONDS_PER_DAY = 24 * 60 * 60


def newest_first(sessions: Iterable[SessionRecord]) -> List[SessionRecord]:
    return sorted(sessions, key=lambda s: s.completed_at, reverse=True)


def oldest_first(sessions: Iterable[SessionRecord]) -> List[SessionRecord]:
    return sorted(sessions, key=lambda s: s.completed_at)


def group_by_module(sessions: Iterable[SessionRecord]) -> Dict[str, List[SessionRecord]]:
    """Group sessions by module name, keeping first-seen module order and input order within."""
    groups: Dict[str, List[SessionRecord]] = defaultdict(list)
    for session in sessions:
        groups[session.module_name].append(session)
    return dict(groups)


def days_between(later: datetime, earlier: datetime) -> float:
    """Fractional days from ``earlier`` to ``later``."""
    return (later - earlier).total_seconds() / SECONDS_PER_DAY


def gapped_pairs(
    sessions: Iterable[SessionRecord], min_gap_days: float = 1.0
) -> List[Tuple[int, SessionRecord, SessionRecord]]:
    """Consecutive chronological pairs separated by more than ``min_gap_days``.

    Yields ``(index_of_current, previous, current)`` so callers can look
    ahead from the comeback session.
    """
    ordered = oldest_first(sessions)
    pairs = []
    for i in range(1, len(ordered)):
        previous, current = ordered[i - 1], ordered[i]
        if days_between(current.completed_at, previous.completed_at) > min_gap_days:
            pairs.append((i, previous, current))
    return pairs


def format_module_name(module_name: str) -> str:
    """Turn a module slug such as ``math-facts-addition`` into a display name."""
    name = module_name.replace("-", " ")
    name = re.sub(r"\b\w", lambda m: m.group(0).upper(), name)
    name = name.replace("Math Facts", "Math Facts:", 1)
    return name.replace("_", " ", 1)
