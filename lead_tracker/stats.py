"""Funnel statistics derived from a list of leads."""
from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable

from .models import Lead, LeadStatus, SheetStats

# A lead that answered in any way, including leads later won or lost.
RESPONDED_STATUSES = frozenset(
    {LeadStatus.RESPONDED, LeadStatus.QUALIFIED, LeadStatus.WON, LeadStatus.LOST}
)


def _rate(numerator: int, denominator: int) -> float:
    return numerator * 100 / denominator if denominator else 0.0


def compute_stats(leads: Iterable[Lead]) -> SheetStats:
    """Count leads per funnel stage and derive contact, response, and conversion rates.

    ``contacted`` and ``responded`` overlap: a won lead counts in both.
    """

    counts = Counter(lead.status for lead in leads)
    total = sum(counts.values())
    contacted = total - counts[LeadStatus.NEW]
    responded = sum(counts[status] for status in RESPONDED_STATUSES)
    won = counts[LeadStatus.WON]

    return SheetStats(
        total=total,
        contacted=contacted,
        not_responded=counts[LeadStatus.NOT_RESPONDED],
        responded=responded,
        won=won,
        lost=counts[LeadStatus.LOST],
        contact_rate=_rate(contacted, total),
        response_rate=_rate(responded, contacted),
        conversion_rate=_rate(won, total),
    )


def status_breakdown(leads: Iterable[Lead]) -> Dict[LeadStatus, int]:
    counts = Counter(lead.status for lead in leads)
    return {status: counts[status] for status in LeadStatus}


__all__ = ["compute_stats", "status_breakdown", "RESPONDED_STATUSES"]
