"""
Shared pytest fixtures for Tempr contract tests.

Contract tests use test doubles (fakes, stubs) to avoid real dependencies.
No network, environment variables or real clocks are used; file-backed
stores write only under pytest's tmp_path.
"""

import pytest

from tempr.app.prompt_orchestrator import PromptOrchestrator
from tempr.context_logic.context_types import WeatherTag
from tempr.music_logic.candidates import TasteProfile
from tempr.state.feedback_store import FeedbackStore
from tempr.state.trigger_log_store import TriggerLogStore
from tempr.tests.contracts.test_doubles import (
    FIXED_NOW,
    FakeCandidateSourcer,
    FakeNotifier,
    FakeStateStore,
    FixedContextBuilder,
    make_context,
    plenty_of_tracks,
)
from tempr.trigger_logic.trigger_model import PromptSettings


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def default_settings():
    """Defaults: all categories on, quiet 23->7, 3 prompts per day."""
    return PromptSettings()


@pytest.fixture
def rain_context():
    return make_context(weather=WeatherTag.RAIN, weather_description="light rain")


@pytest.fixture
def taste():
    return TasteProfile(top_artists=["artist-a"])


@pytest.fixture
def fake_sourcer():
    return FakeCandidateSourcer(
        familiar=plenty_of_tracks("fam", 12),
        discovery=plenty_of_tracks("disc", 12),
    )


@pytest.fixture
def fake_notifier():
    return FakeNotifier()


@pytest.fixture
def log_state():
    return FakeStateStore()


@pytest.fixture
def feedback_state():
    return FakeStateStore()


@pytest.fixture
def make_orchestrator(fake_sourcer, fake_notifier, log_state, feedback_state):
    """Factory building an orchestrator around a fixed context."""
    def _make(context, sourcer=None, notifier=None, **kwargs):
        return PromptOrchestrator(
            snapshot_builder=FixedContextBuilder(context),
            sourcer=sourcer or fake_sourcer,
            notifier=notifier or fake_notifier,
            trigger_log_store=TriggerLogStore(log_state),
            feedback_store=FeedbackStore(feedback_state),
            **kwargs,
        )
    return _make
