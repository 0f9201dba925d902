"""
Queue feedback persistence for Tempr.

Records what the user did with a prompted queue. Kept for 30 days.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional

from tempr.context_logic.time_logic import datetime_from_timestamp
from tempr.state.json_store import JsonStateStore

logger = logging.getLogger(__name__)

FEEDBACK_RETENTION = timedelta(days=30)


class FeedbackAction(str, Enum):
    PLAYED = "played"
    SAVED = "saved"
    DISMISSED = "dismissed"
    NOT_MY_VIBE = "not_my_vibe"


class EnergyFeedback(str, Enum):
    TOO_HIGH = "too_high"
    TOO_LOW = "too_low"
    JUST_RIGHT = "just_right"


@dataclass(frozen=True)
class QueueFeedback:
    queue_id: str
    vibe_id: str
    trigger_source: str
    action: FeedbackAction
    recorded_at: datetime
    energy_feedback: Optional[EnergyFeedback] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "queue_id": self.queue_id,
            "vibe_id": self.vibe_id,
            "trigger_source": self.trigger_source,
            "action": self.action.value,
            "recorded_at": self.recorded_at.timestamp(),
            "energy_feedback": self.energy_feedback.value if self.energy_feedback else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QueueFeedback":
        energy = data.get("energy_feedback")
        return cls(
            queue_id=str(data["queue_id"]),
            vibe_id=str(data["vibe_id"]),
            trigger_source=str(data.get("trigger_source", "")),
            action=FeedbackAction(data["action"]),
            recorded_at=datetime_from_timestamp(data["recorded_at"]),
            energy_feedback=EnergyFeedback(energy) if energy else None,
        )


class FeedbackStore:
    """Rolling 30-day feedback log."""
    
    def __init__(self, store: JsonStateStore):
        self._store = store
    
    def load(self) -> List[QueueFeedback]:
        records = []
        for item in self._store.load(default=[]):
            try:
                records.append(QueueFeedback.from_dict(item))
            except (KeyError, TypeError, ValueError) as e:
                logger.debug(f"[STATE] Dropping malformed feedback record {item!r}: {e}")
        return records
    
    def append(self, feedback: QueueFeedback, now: Optional[datetime] = None) -> None:
        """Append a record, dropping records older than the retention window."""
        cutoff = (now or feedback.recorded_at) - FEEDBACK_RETENTION
        records = [r for r in self.load() if r.recorded_at > cutoff]
        records.append(feedback)
        self._store.save([r.to_dict() for r in records])
        logger.debug(f"[STATE] Feedback recorded: {feedback.action.value} for queue {feedback.queue_id}")
