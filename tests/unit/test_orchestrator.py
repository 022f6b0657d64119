import pytest

from daily_git_brief.data_collection.orchestrator import CollectionOrchestrator
from daily_git_brief.exceptions import CollectionError, CollectorError
from tests.fakes import RUN_DATE, FakeCodeHost, FakeSummarizer, FakeTrendSource


def _orchestrator(candidates, code_host, summarizer, store, settings, **kwargs):
    return CollectionOrchestrator(
        FakeTrendSource(candidates, **kwargs),
        code_host,
        summarizer,
        store,
        settings,
        clock=lambda: RUN_DATE,
    )


@pytest.mark.asyncio
async def test_run_persists_every_candidate(candidates, code_host, summarizer, store, test_settings, sink):
    orchestrator = _orchestrator(candidates, code_host, summarizer, store, test_settings)

    collected = await orchestrator.run(sink)

    assert collected == 3
    assert set(store.repos) == {(RUN_DATE, 1), (RUN_DATE, 2), (RUN_DATE, 3)}
    alpha = store.repos[(RUN_DATE, 1)]
    assert alpha.summary == "summary of octo/alpha"
    assert alpha.stars == 1200
    assert alpha.total_score == 300.0


@pytest.mark.asyncio
async def test_language_rows_respect_threshold(candidates, code_host, summarizer, store, test_settings):
    await _orchestrator(candidates, code_host, summarizer, store, test_settings).run()

    gamma_languages = {lang for (_, repo_id, lang) in store.languages if repo_id == 3}
    # Shell is 10% of gamma's bytes, below the 20% threshold
    assert gamma_languages == {"Rust"}
    assert store.languages[(RUN_DATE, 1, "JavaScript")].percentage == pytest.approx(70.0)
    assert store.languages[(RUN_DATE, 1, "Python")].percentage == pytest.approx(30.0)


@pytest.mark.asyncio
async def test_daily_trends_sum_to_hundred(candidates, code_host, summarizer, store, test_settings):
    await _orchestrator(candidates, code_host, summarizer, store, test_settings).run()

    trends = {language: trend for (_, language), trend in store.trends.items()}
    assert set(trends) == {"Python", "JavaScript", "Go", "Rust"}
    assert sum(t.normalized_percentage for t in trends.values()) == pytest.approx(100.0)
    # Mass: alpha 30 + 70, beta 100, gamma 90 (Shell was dropped)
    assert trends["Go"].normalized_percentage == pytest.approx(100.0 / 290 * 100)
    assert trends["Python"].normalized_percentage == pytest.approx(30.0 / 290 * 100)
    assert all(t.repo_count == 1 for t in trends.values())


@pytest.mark.asyncio
async def test_progress_events(candidates, code_host, summarizer, store, test_settings, sink):
    await _orchestrator(candidates, code_host, summarizer, store, test_settings).run(sink)

    messages = [event.message for event in sink.events]
    assert messages == [
        "Fetched 3 repos from OSS Insight",
        "Processed octo/alpha",
        "Processed octo/beta",
        "Processed octo/gamma",
        "Collection complete. Collected 3 repos.",
    ]
    assert all(event.is_running for event in sink.events[:-1])
    terminal = sink.events[-1]
    assert terminal.is_running is False
    assert terminal.current_count == terminal.total_count == 3
    assert [event.current_count for event in sink.events[1:4]] == [1, 2, 3]


@pytest.mark.asyncio
async def test_second_run_skips_summarized_repos(candidates, code_host, summarizer, store, test_settings, sink):
    orchestrator = _orchestrator(candidates, code_host, summarizer, store, test_settings)
    await orchestrator.run()
    repos_before = dict(store.repos)
    summarizer.calls.clear()

    collected = await orchestrator.run(sink)

    assert collected == 0
    assert summarizer.calls == []
    assert store.repos == repos_before
    assert [event.message for event in sink.events] == [
        "Fetched 3 repos from OSS Insight",
        "Collection complete. Collected 0 repos.",
    ]


@pytest.mark.asyncio
async def test_repo_without_summary_is_reprocessed(candidates, code_host, store, test_settings):
    failing = FakeSummarizer(failing={"octo/beta"})
    orchestrator = _orchestrator(candidates, code_host, failing, store, test_settings)
    assert await orchestrator.run() == 3
    assert store.repos[(RUN_DATE, 2)].summary is None

    recovered = FakeSummarizer()
    orchestrator.summarizer = recovered
    assert await orchestrator.run() == 1
    assert recovered.calls == ["octo/beta"]
    assert store.repos[(RUN_DATE, 2)].summary == "summary of octo/beta"


@pytest.mark.asyncio
async def test_readme_failure_is_isolated(candidates, summarizer, store, test_settings):
    code_host = FakeCodeHost(
        readmes={"octo/alpha": "# Alpha", "octo/gamma": "# Gamma"},
        language_bytes={"octo/alpha": {"Python": 10}, "octo/beta": {"Go": 10}},
        readme_errors={"octo/alpha"},
    )

    collected = await _orchestrator(candidates, code_host, summarizer, store, test_settings).run()

    assert collected == 3
    assert store.repos[(RUN_DATE, 1)].summary is None
    # No README means the summarizer is never asked
    assert store.repos[(RUN_DATE, 2)].summary is None
    assert summarizer.calls == ["octo/gamma"]
    assert (RUN_DATE, 1, "Python") in store.languages


@pytest.mark.asyncio
async def test_language_failure_keeps_record(candidates, summarizer, store, test_settings):
    code_host = FakeCodeHost(
        readmes={"octo/alpha": "# Alpha"},
        language_bytes={"octo/beta": {"Go": 10}},
        language_errors={"octo/alpha"},
    )

    collected = await _orchestrator(candidates, code_host, summarizer, store, test_settings).run()

    assert collected == 3
    assert store.repos[(RUN_DATE, 1)].summary == "summary of octo/alpha"
    assert not [key for key in store.languages if key[1] == 1]
    assert store.trends[(RUN_DATE, "Go")].normalized_percentage == pytest.approx(100.0)


@pytest.mark.asyncio
async def test_no_language_data_writes_no_trends(candidates, summarizer, store, test_settings, sink):
    code_host = FakeCodeHost()

    collected = await _orchestrator(candidates, code_host, summarizer, store, test_settings).run(sink)

    assert collected == 3
    assert store.trends == {}
    assert sink.events[-1].message == "Collection complete. Collected 3 repos."


@pytest.mark.asyncio
async def test_fetch_failure_raises_collection_error(code_host, summarizer, store, test_settings, sink):
    orchestrator = _orchestrator(
        [], code_host, summarizer, store, test_settings, error=CollectorError("oss_insight", "HTTP 503")
    )

    with pytest.raises(CollectionError):
        await orchestrator.run(sink)

    assert sink.events == []
    assert store.repos == {}


@pytest.mark.asyncio
async def test_empty_candidate_set(code_host, summarizer, store, test_settings, sink):
    collected = await _orchestrator([], code_host, summarizer, store, test_settings).run(sink)

    assert collected == 0
    assert store.trends == {}
    assert [event.message for event in sink.events] == [
        "Fetched 0 repos from OSS Insight",
        "Collection complete. Collected 0 repos.",
    ]


@pytest.mark.asyncio
async def test_record_write_failure_is_not_counted(candidates, code_host, summarizer, store, test_settings, sink):
    store.fail_repo_ids = {2}

    collected = await _orchestrator(candidates, code_host, summarizer, store, test_settings).run(sink)

    assert collected == 2
    assert (RUN_DATE, 2) not in store.repos
    # Languages of the failed repo still count toward the daily trend
    assert (RUN_DATE, "Go") in store.trends
    assert sink.events[-1].message == "Collection complete. Collected 2 repos."


@pytest.mark.asyncio
async def test_skip_query_failure_processes_everything(candidates, code_host, summarizer, store, test_settings):
    orchestrator = _orchestrator(candidates, code_host, summarizer, store, test_settings)
    await orchestrator.run()
    store.fail_skip_query = True
    summarizer.calls.clear()

    collected = await orchestrator.run()

    assert collected == 3
    assert summarizer.calls == ["octo/alpha", "octo/beta", "octo/gamma"]


@pytest.mark.asyncio
async def test_failing_progress_sink_does_not_abort(candidates, code_host, summarizer, store, test_settings):
    class BrokenSink:
        def publish(self, event):
            raise RuntimeError("subscriber gone")

    collected = await _orchestrator(candidates, code_host, summarizer, store, test_settings).run(BrokenSink())

    assert collected == 3


class _RecordingMetrics:
    def __init__(self):
        self.runs = []
        self.degraded = []

    def record_collection_run(self, status, duration, repos_collected=0):
        self.runs.append((status, repos_collected))

    def record_degraded_step(self, step):
        self.degraded.append(step)


@pytest.mark.asyncio
async def test_metrics_hooks(candidates, summarizer, store, test_settings):
    metrics = _RecordingMetrics()
    code_host = FakeCodeHost(readme_errors={"octo/alpha"}, language_errors={"octo/beta"})
    orchestrator = CollectionOrchestrator(
        FakeTrendSource(candidates),
        code_host,
        summarizer,
        store,
        test_settings,
        metrics=metrics,
        clock=lambda: RUN_DATE,
    )

    await orchestrator.run()

    assert metrics.runs == [("success", 3)]
    assert sorted(metrics.degraded) == ["languages", "readme"]
