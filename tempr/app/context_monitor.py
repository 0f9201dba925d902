"""
Context Monitor for Tempr.

Runs the prompt cycle periodically: at most once per check interval,
however often it is poked.
"""

import logging
import threading
import time
from typing import Callable, Optional

from tempr.app.prompt_orchestrator import PromptCycleResult, PromptOrchestrator
from tempr.music_logic.candidates import TasteProfile

logger = logging.getLogger(__name__)


class ContextMonitor:
    """
    Periodic driver for PromptOrchestrator.
    
    Cycles are serialised: maybe_check() is the only caller of
    run_prompt_cycle and runs on the monitor thread.
    """
    
    def __init__(
        self,
        orchestrator: PromptOrchestrator,
        taste_provider: Callable[[], TasteProfile],
        check_interval_sec: float = 900.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the monitor.
        
        Args:
            orchestrator: Orchestrator to drive
            taste_provider: Returns the user's current taste profile
            check_interval_sec: Minimum seconds between cycles
            clock: Monotonic clock (injected for tests)
        """
        self.orchestrator = orchestrator
        self.taste_provider = taste_provider
        self.check_interval_sec = check_interval_sec
        self._clock = clock
        self._last_check: Optional[float] = None
        self._stop_event = threading.Event()
    
    def maybe_check(self) -> Optional[PromptCycleResult]:
        """
        Run a cycle if the check interval has elapsed since the last one.
        
        Returns:
            The cycle result, or None if it was too soon to check
        """
        now = self._clock()
        if self._last_check is not None and now - self._last_check < self.check_interval_sec:
            return None
        self._last_check = now
        
        try:
            taste = self.taste_provider()
        except Exception as e:
            logger.warning(f"[MONITOR] Could not load taste profile, skipping cycle: {e}")
            return None
        
        result = self.orchestrator.run_prompt_cycle(taste)
        logger.debug(f"[MONITOR] Cycle result: status={result.status}, reason={result.reason}")
        return result
    
    def run_forever(self, poll_sec: float = 30.0) -> None:
        """Poll until stop() is called."""
        logger.info(f"[MONITOR] Started (interval={self.check_interval_sec}s)")
        while not self._stop_event.is_set():
            self.maybe_check()
            self._stop_event.wait(poll_sec)
        logger.info("[MONITOR] Stopped")
    
    def stop(self) -> None:
        self._stop_event.set()
