import pytest

from daily_git_brief.data_collection.aggregation import LanguageTrendAccumulator
from daily_git_brief.domain.models import LanguageShare
from tests.fakes import RUN_DATE


def _shares(**percentages):
    return [LanguageShare(language=lang, percentage=pct) for lang, pct in percentages.items()]


def test_single_repo_keeps_its_shares():
    acc = LanguageTrendAccumulator()
    acc.fold(_shares(Python=30.0, JavaScript=70.0))

    trends = acc.normalize(RUN_DATE)

    assert [t.language for t in trends] == ["JavaScript", "Python"]
    assert trends[0].normalized_percentage == pytest.approx(70.0)
    assert trends[1].normalized_percentage == pytest.approx(30.0)
    assert all(t.date == RUN_DATE and t.repo_count == 1 for t in trends)


def test_normalizes_against_total_mass():
    acc = LanguageTrendAccumulator()
    acc.fold(_shares(Python=30.0, JavaScript=70.0))
    acc.fold(_shares(Python=100.0))

    assert acc.total_mass == pytest.approx(200.0)
    trends = {t.language: t for t in acc.normalize(RUN_DATE)}
    assert trends["Python"].normalized_percentage == pytest.approx(65.0)
    assert trends["Python"].repo_count == 2
    assert trends["JavaScript"].normalized_percentage == pytest.approx(35.0)


def test_thresholded_shares_still_sum_to_hundred():
    acc = LanguageTrendAccumulator()
    acc.fold(_shares(Rust=90.0))
    acc.fold(_shares(Go=55.0, C=25.0))

    total = sum(t.normalized_percentage for t in acc.normalize(RUN_DATE))
    assert total == pytest.approx(100.0)


def test_empty_accumulator_yields_nothing():
    acc = LanguageTrendAccumulator()
    acc.fold([])

    assert acc.total_mass == 0
    assert acc.normalize(RUN_DATE) == []
    assert len(acc) == 0


def test_merge_equals_sequential_fold():
    left, right, combined = LanguageTrendAccumulator(), LanguageTrendAccumulator(), LanguageTrendAccumulator()
    repos = [_shares(Python=60.0, Shell=40.0), _shares(Python=100.0), _shares(Go=80.0, Shell=20.0)]

    left.fold(repos[0])
    right.fold(repos[1])
    right.fold(repos[2])
    for shares in repos:
        combined.fold(shares)
    left.merge(right)

    assert left.totals == combined.totals
    assert len(left) == 3
