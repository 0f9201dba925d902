"""
Prompt Orchestrator for Tempr.

Runs one prompt cycle end to end:

    build context -> evaluate trigger -> (fire) source candidates
    -> assemble queue -> append fired entry to trigger log -> notify

A suppressed decision returns immediately without touching the log.
A sourcing or assembly failure is reported as generation_error and does
not write a log entry, so a transient failure does not consume the
cooldown or the daily cap. Nothing escapes run_prompt_cycle as an
exception.

Cycles for one user must not overlap: the trigger log read-then-append
is not atomic. The orchestrator holds a single-flight lock; an
overlapping call is suppressed with cycle_in_progress.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

from tempr.context_logic.snapshot import ContextSnapshotBuilder
from tempr.music_logic.candidates import CandidateSourcer, TasteProfile, Track
from tempr.music_logic.queue_assembler import (
    MIN_PRACTICAL_CANDIDATES,
    GeneratedQueue,
    assemble_queue,
    prepare_pools,
)
from tempr.music_logic.vibes import mood_description
from tempr.outputs.notifier import Notifier
from tempr.state.feedback_store import EnergyFeedback, FeedbackAction, FeedbackStore, QueueFeedback
from tempr.state.settings_store import SettingsStore
from tempr.state.trigger_log_store import TriggerLogStore
from tempr.trigger_logic.trigger_evaluator import evaluate_trigger
from tempr.trigger_logic.trigger_model import (
    PromptSettings,
    SuppressionReason,
    TriggerLogEntry,
    TriggerSource,
)

logger = logging.getLogger(__name__)

STATUS_FIRED = "fired"
STATUS_SUPPRESSED = "suppressed"

PlaybackProbe = Callable[[], bool]


@dataclass(frozen=True)
class PromptCycleResult:
    """
    Outcome of one prompt cycle.
    
    Either status="fired" with a queue (possibly empty) and the
    notification id (None if not sent), or status="suppressed" with a reason.
    """
    status: str
    queue: Optional[GeneratedQueue] = None
    notification_id: Optional[str] = None
    reason: Optional[str] = None

    @property
    def fired(self) -> bool:
        return self.status == STATUS_FIRED

    @classmethod
    def suppressed(cls, reason: str) -> "PromptCycleResult":
        return cls(status=STATUS_SUPPRESSED, reason=reason)


class PromptOrchestrator:
    """
    Wires context, trigger evaluation, candidate sourcing, queue assembly
    and notification into one operation, and owns the trigger log writes.
    """
    
    def __init__(
        self,
        snapshot_builder: ContextSnapshotBuilder,
        sourcer: CandidateSourcer,
        notifier: Notifier,
        trigger_log_store: TriggerLogStore,
        settings_store: Optional[SettingsStore] = None,
        feedback_store: Optional[FeedbackStore] = None,
        playback_probe: Optional[PlaybackProbe] = None,
        min_candidates: int = MIN_PRACTICAL_CANDIDATES,
    ):
        """
        Initialize the orchestrator.
        
        Args:
            snapshot_builder: Builds the context snapshot for each cycle
            sourcer: Candidate sourcer
            notifier: Notifier that hands the queue to the user
            trigger_log_store: Persistence for the trigger log
            settings_store: Persistence for prompt settings (defaults used if None)
            feedback_store: Persistence for queue feedback (feedback not kept if None)
            playback_probe: Returns True if the user is already listening
            min_candidates: Below this many filtered candidates a broader pool is requested
        """
        self.snapshot_builder = snapshot_builder
        self.sourcer = sourcer
        self.notifier = notifier
        self.trigger_log_store = trigger_log_store
        self.settings_store = settings_store
        self.feedback_store = feedback_store
        self.playback_probe = playback_probe
        self.min_candidates = min_candidates
        
        # Single writer for the trigger log
        self._cycle_lock = threading.Lock()
        
        # Last fired queue; replaced by the next fire, never mutated
        self._pending_queue: Optional[GeneratedQueue] = None
        
        logger.info("PromptOrchestrator initialized")
    
    @property
    def pending_queue(self) -> Optional[GeneratedQueue]:
        return self._pending_queue
    
    def clear_pending_queue(self) -> None:
        self._pending_queue = None
    
    def run_prompt_cycle(
        self,
        taste: TasteProfile,
        settings: Optional[PromptSettings] = None,
        now: Optional[datetime] = None,
    ) -> PromptCycleResult:
        """
        Run one prompt cycle.
        
        Args:
            taste: User taste data for candidate sourcing
            settings: Prompt settings (loaded from the settings store if None)
            now: Cycle time (defaults to the snapshot builder's clock)
            
        Returns:
            PromptCycleResult
        """
        if not self._cycle_lock.acquire(blocking=False):
            logger.warning("[PROMPT] Cycle already in progress, skipping")
            return PromptCycleResult.suppressed(SuppressionReason.CYCLE_IN_PROGRESS.value)
        
        try:
            return self._run_cycle(taste, settings, now)
        finally:
            self._cycle_lock.release()
    
    def _run_cycle(
        self,
        taste: TasteProfile,
        settings: Optional[PromptSettings],
        now: Optional[datetime],
    ) -> PromptCycleResult:
        context = self.snapshot_builder.build(now)
        now = now or context.captured_at
        
        if self._user_is_playing():
            logger.info("[PROMPT] Suppressed: user is already playing music")
            return PromptCycleResult.suppressed(SuppressionReason.USER_CURRENTLY_PLAYING.value)
        
        if settings is None:
            settings = self.settings_store.load() if self.settings_store else PromptSettings()
        
        log = self.trigger_log_store.load(now)
        decision = evaluate_trigger(context, settings, log, now)
        
        if not decision.should_fire:
            logger.info(f"[PROMPT] Suppressed: {decision.reason} (source={decision.trigger_source})")
            return PromptCycleResult.suppressed(decision.reason)
        
        vibe = decision.vibe
        mood = mood_description(vibe, context)
        
        try:
            pools = self.sourcer.source_candidates(mood, taste)
            discovery: List[Track] = list(pools.discovery)
            
            familiar_pool, discovery_pool = prepare_pools(pools.familiar, discovery)
            candidate_count = len(familiar_pool) + len(discovery_pool)
            if candidate_count < self.min_candidates:
                logger.info(
                    f"[PROMPT] Only {candidate_count} candidates after filtering, requesting broader pool"
                )
                discovery.extend(self.sourcer.broaden(vibe, taste))
            
            assembly = assemble_queue(pools.familiar, discovery, vibe.target_duration_ms)
        except Exception as e:
            logger.warning(f"[PROMPT] Queue generation failed for {vibe.id}: {e}")
            return PromptCycleResult.suppressed(SuppressionReason.GENERATION_ERROR.value)
        
        queue = GeneratedQueue.from_assembly(
            assembly, vibe, context, generated_at=now, reasoning=pools.reasoning
        )
        
        entry = TriggerLogEntry(vibe_id=vibe.id, trigger_source=decision.trigger_source, fired_at=now)
        try:
            self.trigger_log_store.save(log.append(entry, now))
        except Exception as e:
            logger.error(f"[PROMPT] Failed to persist trigger log entry for {decision.trigger_source}: {e}")
        
        self._pending_queue = queue
        
        if queue.is_empty:
            logger.warning(f"[PROMPT] No candidates for {vibe.id}, queue is empty; not notifying")
            return PromptCycleResult(status=STATUS_FIRED, queue=queue, notification_id=None)
        
        notification_id = self._notify(queue)
        logger.info(
            f"[PROMPT] Fired {vibe.id} via {decision.trigger_source}: {len(queue.tracks)} tracks, "
            f"{queue.total_duration_minutes} min, notification={notification_id}"
        )
        return PromptCycleResult(status=STATUS_FIRED, queue=queue, notification_id=notification_id)
    
    def _user_is_playing(self) -> bool:
        if self.playback_probe is None:
            return False
        try:
            return bool(self.playback_probe())
        except Exception as e:
            logger.debug(f"[PROMPT] Playback probe failed, assuming not playing: {e}")
            return False
    
    def _notify(self, queue: GeneratedQueue) -> Optional[str]:
        try:
            return self.notifier.notify(queue.vibe, queue.context)
        except Exception as e:
            logger.warning(f"[PROMPT] Notifier failed for {queue.vibe.id}: {e}")
            return None
    
    def record_dismissal(self, trigger_source: TriggerSource, now: Optional[datetime] = None) -> None:
        """
        Mark the latest fire for trigger_source as dismissed.
        
        Waits for any in-flight cycle so the log has a single writer.
        """
        with self._cycle_lock:
            log = self.trigger_log_store.load(now or datetime.now())
            self.trigger_log_store.save(log.mark_dismissed(trigger_source))
        logger.info(f"[PROMPT] Dismissal recorded for {trigger_source}")
    
    def record_feedback(
        self,
        queue: GeneratedQueue,
        trigger_source: TriggerSource,
        action: FeedbackAction,
        energy_feedback: Optional[EnergyFeedback] = None,
        now: Optional[datetime] = None,
    ) -> None:
        """
        Record what the user did with a prompted queue.
        
        A DISMISSED action also marks the trigger log entry dismissed.
        """
        now = now or datetime.now()
        if self.feedback_store is not None:
            self.feedback_store.append(
                QueueFeedback(
                    queue_id=queue.queue_id,
                    vibe_id=queue.vibe.id,
                    trigger_source=str(trigger_source),
                    action=action,
                    recorded_at=now,
                    energy_feedback=energy_feedback,
                ),
                now,
            )
        if action == FeedbackAction.DISMISSED:
            self.record_dismissal(trigger_source, now)
