"""Global pytest fixtures.

Centralizes:
 - Test settings (no courtesy delay, no metrics server, no .env file)
 - Fake collaborators for the orchestrator and the data app
"""

import pytest

from daily_git_brief.core.config import Settings
from tests.fakes import FakeCodeHost, FakeSummarizer, InMemoryStore, RecordingSink, make_candidate


@pytest.fixture
def test_settings():
    return Settings(
        _env_file=None,
        collection_delay_seconds=0,
        enable_metrics=False,
        enable_scheduled_collection=False,
        progress_queue_size=10,
    )


@pytest.fixture
def candidates():
    return [
        make_candidate(1, "octo/alpha", 300.0, primary_language="Python", stars="1200"),
        make_candidate(2, "octo/beta", 200.0, primary_language="Go"),
        make_candidate(3, "octo/gamma", 100.0, primary_language="Rust"),
    ]


@pytest.fixture
def code_host():
    return FakeCodeHost(
        readmes={
            "octo/alpha": "# Alpha",
            "octo/beta": "# Beta",
            "octo/gamma": "# Gamma",
        },
        language_bytes={
            "octo/alpha": {"Python": 300, "JavaScript": 700},
            "octo/beta": {"Go": 1000},
            "octo/gamma": {"Rust": 900, "Shell": 100},
        },
    )


@pytest.fixture
def summarizer():
    return FakeSummarizer()


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def sink():
    return RecordingSink()
