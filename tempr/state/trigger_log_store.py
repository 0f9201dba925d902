"""
Trigger log persistence for Tempr.
"""

import logging
from datetime import datetime
from typing import Optional

from tempr.state.json_store import JsonStateStore
from tempr.trigger_logic.trigger_model import TriggerLog, TriggerLogEntry

logger = logging.getLogger(__name__)


class TriggerLogStore:
    """
    Reads and writes the whole trigger log.
    
    A missing or corrupt log reads as empty, so a damaged file can never
    block prompts forever. Entries that fail to parse are dropped.
    """
    
    def __init__(self, store: JsonStateStore):
        self._store = store
    
    def load(self, now: Optional[datetime] = None) -> TriggerLog:
        """
        Load the trigger log.
        
        Args:
            now: If given, entries outside the retention window are pruned
        """
        entries = []
        for item in self._store.load(default=[]):
            try:
                entries.append(TriggerLogEntry.from_dict(item))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"[STATE] Dropping malformed trigger log entry {item!r}: {e}")
        
        log = TriggerLog(tuple(entries))
        return log.pruned(now) if now else log
    
    def save(self, log: TriggerLog) -> None:
        self._store.save(log.to_list())
        logger.debug(f"[STATE] Trigger log saved ({len(log)} entries)")
