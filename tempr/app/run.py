"""
Main entry point for Tempr.

Loads configuration, wires the context sources, stores, candidate
sourcer and notifier, and runs the prompt cycle once or continuously.
"""

import argparse
import json
import logging
import logging.handlers
import signal
import sys
from datetime import datetime
from typing import Optional

from tempr.app.config import TemprConfig
from tempr.app.context_monitor import ContextMonitor
from tempr.app.prompt_orchestrator import PromptOrchestrator
from tempr.context_logic.calendar_events import entries_from_dicts, nearest_event
from tempr.context_logic.context_types import LocationCategory
from tempr.context_logic.location import classify_place, parse_location_category
from tempr.context_logic.snapshot import ContextSnapshotBuilder
from tempr.context_logic.weather import OpenWeatherClient
from tempr.music_logic.candidates import CandidateSourcer, HttpCandidateSourcer, TasteProfile
from tempr.outputs.notifier import Notifier, NullNotifier, WebhookNotifier
from tempr.state.feedback_store import FeedbackStore
from tempr.state.json_store import JsonStateStore
from tempr.state.settings_store import SettingsStore
from tempr.state.trigger_log_store import TriggerLogStore

logger = logging.getLogger(__name__)


def setup_logging(level: str, log_file: Optional[str] = None) -> None:
    """
    Configure root logging, optionally also writing to a log file.
    
    The file handler tolerates external rotation, and write failures
    never propagate into a prompt cycle.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    if not log_file:
        return
    
    try:
        handler = logging.handlers.WatchedFileHandler(log_file, mode='a')
    except OSError as e:
        logger.warning(f"Cannot open log file {log_file}, logging to stderr only: {e}")
        return
    
    handler.setFormatter(logging.Formatter('%(asctime)s [%(levelname)s] %(name)s: %(message)s'))
    original_emit = handler.emit
    
    def safe_emit(record):
        try:
            original_emit(record)
        except (IOError, OSError):
            pass
    
    handler.emit = safe_emit
    logging.getLogger().addHandler(handler)


def _location_source(config: TemprConfig):
    if not config.place:
        return None
    
    def read_location() -> LocationCategory:
        explicit = parse_location_category(config.place)
        if explicit != LocationCategory.UNKNOWN:
            return explicit
        return classify_place(config.place)
    
    return read_location


def _calendar_source(config: TemprConfig):
    if not config.calendar_file:
        return None
    calendar_store = JsonStateStore(config.calendar_file)
    
    def read_calendar(now: datetime):
        return nearest_event(entries_from_dicts(calendar_store.load(default=[])), now)
    
    return read_calendar


class _UnconfiguredSourcer(CandidateSourcer):
    """Fails every request; reported by the orchestrator as generation_error."""
    
    def source_candidates(self, mood_description, taste):
        raise RuntimeError("No recommender configured (set TEMPR_RECOMMENDER_URL)")


def build_orchestrator(config: TemprConfig) -> PromptOrchestrator:
    """Wire all collaborators from configuration."""
    weather_source = None
    if config.latitude is not None and config.longitude is not None:
        weather_client = OpenWeatherClient(
            api_key=config.openweather_api_key,
            base_url=config.openweather_url,
            timeout=config.http_timeout_sec,
        )
        weather_source = weather_client.source_for(config.latitude, config.longitude)
    
    builder = ContextSnapshotBuilder(
        location_source=_location_source(config),
        weather_source=weather_source,
        calendar_source=_calendar_source(config),
    )
    
    sourcer: CandidateSourcer
    if config.recommender_url:
        sourcer = HttpCandidateSourcer(config.recommender_url, timeout=config.http_timeout_sec)
    else:
        sourcer = _UnconfiguredSourcer()
    
    notifier: Notifier
    if config.notify_webhook_url:
        notifier = WebhookNotifier(config.notify_webhook_url, timeout=config.http_timeout_sec)
    else:
        notifier = NullNotifier()
    
    return PromptOrchestrator(
        snapshot_builder=builder,
        sourcer=sourcer,
        notifier=notifier,
        trigger_log_store=TriggerLogStore(JsonStateStore(config.trigger_log_path)),
        settings_store=SettingsStore(JsonStateStore(config.settings_path)),
        feedback_store=FeedbackStore(JsonStateStore(config.feedback_path)),
        min_candidates=config.min_candidates,
    )


def _taste_provider(path: Optional[str]):
    store = JsonStateStore(path) if path else None
    
    def load_taste() -> TasteProfile:
        data = store.load(default={}) if store else {}
        try:
            return TasteProfile.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Taste profile in {path} is malformed, using an empty profile: {e}")
            return TasteProfile()
    
    return load_taste


def main(args: Optional[list] = None) -> int:
    """
    Main entry point for Tempr.
    
    Returns:
        Process exit code
    """
    parser = argparse.ArgumentParser(prog="tempr", description="Contextual music prompt engine")
    parser.add_argument("--once", action="store_true", help="run a single prompt cycle and exit")
    parser.add_argument("--taste-file", help="JSON file with the user's taste profile")
    opts = parser.parse_args(args)
    
    try:
        config = TemprConfig.load_config()
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    
    setup_logging(config.log_level, config.log_file)
    
    orchestrator = build_orchestrator(config)
    taste_provider = _taste_provider(opts.taste_file)
    
    if opts.once:
        result = orchestrator.run_prompt_cycle(taste_provider())
        output = {"status": result.status, "reason": result.reason, "notification_id": result.notification_id}
        if result.queue is not None:
            output["queue"] = result.queue.to_dict()
        print(json.dumps(output, indent=2))
        return 0
    
    monitor = ContextMonitor(orchestrator, taste_provider, check_interval_sec=config.check_interval_sec)
    
    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, stopping")
        monitor.stop()
    
    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)
    
    monitor.run_forever()
    return 0


if __name__ == "__main__":
    sys.exit(main())
