"""
Language trend aggregation

Pure folding/normalization of per-repository language shares into the daily
language trend. Kept free of I/O so the math can be tested on its own.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Iterable

from daily_git_brief.domain.models import LanguageShare, LanguageTrend


@dataclass
class LanguageTotals:
    percentage_sum: float = 0.0
    repo_count: int = 0


@dataclass
class LanguageTrendAccumulator:
    """Sum of percentages and contributing repo count per language for one run."""

    totals: dict[str, LanguageTotals] = field(default_factory=dict)

    def fold(self, shares: Iterable[LanguageShare]) -> None:
        """Add one repository's language shares."""
        for share in shares:
            entry = self.totals.setdefault(share.language, LanguageTotals())
            entry.percentage_sum += share.percentage
            entry.repo_count += 1

    def merge(self, other: "LanguageTrendAccumulator") -> None:
        """Combine with an accumulator folded elsewhere (e.g. a parallel worker)."""
        for language, totals in other.totals.items():
            entry = self.totals.setdefault(language, LanguageTotals())
            entry.percentage_sum += totals.percentage_sum
            entry.repo_count += totals.repo_count

    @property
    def total_mass(self) -> float:
        return sum(entry.percentage_sum for entry in self.totals.values())

    def normalize(self, date: dt.date) -> list[LanguageTrend]:
        """Rescale every language against the total mass so the day sums to 100.

        Returns an empty list when nothing was observed (total mass of zero).
        """
        total = self.total_mass
        if total <= 0:
            return []

        trends = [
            LanguageTrend(
                date=date,
                language=language,
                normalized_percentage=(entry.percentage_sum / total) * 100.0,
                repo_count=entry.repo_count,
            )
            for language, entry in self.totals.items()
        ]
        trends.sort(key=lambda trend: trend.normalized_percentage, reverse=True)
        return trends

    def __len__(self) -> int:
        return len(self.totals)
