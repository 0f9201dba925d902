"""
Prompt notifiers for Tempr.

A notifier tells the user a queue is ready. It returns a notification id
when the notification was sent, or None when it was not (no permission,
no endpoint configured, delivery refused). None is not an error.
"""

import logging
import random
import uuid
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple

import httpx

from tempr.context_logic.snapshot import ContextSnapshot
from tempr.music_logic.vibes import VibeProfile

logger = logging.getLogger(__name__)

# (titles, bodies) per vibe id
VIBE_TEMPLATES: Dict[str, Tuple[List[str], List[str]]] = {
    "rainy_chill": (
        ["Rainy day vibes", "Rain incoming", "Perfect rain day"],
        [
            "We put together a mellow rainy-day queue for you.",
            "Here's a chill queue to match the weather.",
            "Rain outside? Here's some cozy music inside.",
        ],
    ),
    "storm_intense": (
        ["Storm mode", "Wild weather outside"],
        [
            "Dark, atmospheric tracks for this stormy moment.",
            "The weather's intense, your music should match.",
        ],
    ),
    "snow_cozy": (
        ["Snowy vibes", "Bundle up"],
        ["Warm, cozy tracks for a snowy day.", "Here's something to curl up with."],
    ),
    "romantic_warm": (
        ["Date night soon?", "Something romantic"],
        [
            "We put together a warm romantic queue for you.",
            "Here's a smooth pre-date playlist to set the mood.",
        ],
    ),
    "gym_hype": (
        ["Gym time", "Let's go", "Time to lock in"],
        [
            "High-energy queue ready to fuel your workout.",
            "Here's a hype queue to push through that session.",
            "Ready for the gym? We got your playlist.",
        ],
    ),
    "focus_study": (
        ["Focus mode", "Time to lock in"],
        [
            "Here's a quiet, minimal queue for deep focus.",
            "Study session? This queue will keep you in the zone.",
        ],
    ),
    "travel_smooth": (
        ["Travel mode", "Bon voyage"],
        ["Smooth tracks for your journey.", "Here's a travel queue. Enjoy the ride."],
    ),
    "morning_gentle": (
        ["Good morning", "Rise and shine"],
        ["Start your day with some gentle tunes.", "Here's a soft morning queue to ease you in."],
    ),
    "afternoon_cruise": (
        ["Afternoon vibes", "Easy afternoon"],
        ["Cruising through the afternoon? Here's a vibe.", "Feel-good tracks for the rest of your day."],
    ),
    "night_winddown": (
        ["Wind down time", "Evening calm"],
        [
            "Here's a soothing queue to end your evening.",
            "Time to relax, we've got the perfect soundtrack.",
        ],
    ),
    "late_night_deep": (
        ["Late night", "Still up?"],
        ["Deep, introspective tracks for the late hours.", "Here's something for the quiet of the night."],
    ),
    "party_energy": (
        ["Party time", "Let's celebrate"],
        ["Energy's up. Here's a party queue to match.", "Get the vibe going with this one."],
    ),
    "cafe_acoustic": (
        ["Cafe vibes", "Coffee time"],
        ["Acoustic, laid-back tunes for your cafe moment.", "Here's something mellow to sip to."],
    ),
    "park_sunny": (
        ["Sunny vibes", "Nice day out"],
        ["Bright tracks for a sunny moment.", "Enjoy the weather with this feel-good queue."],
    ),
    "commute_flow": (
        ["On the move", "Commute flow"],
        ["Rhythmic tracks to keep you moving.", "Here's a flow for your commute."],
    ),
}

GENERIC_TEMPLATE: Tuple[List[str], List[str]] = (
    ["Queue ready", "New queue for you"],
    ["We built a personalized queue based on your moment.", "Here's a fresh queue, tap to listen."],
)


def notification_copy(vibe: VibeProfile, rng: random.Random) -> Tuple[str, str]:
    """
    Pick a (title, body) pair for a vibe.
    
    Args:
        vibe: Vibe the queue was built for
        rng: Random source (seed it for reproducible copy)
    """
    titles, bodies = VIBE_TEMPLATES.get(vibe.id, GENERIC_TEMPLATE)
    return rng.choice(titles), rng.choice(bodies)


class Notifier(ABC):
    """Hands a prompted queue off to the user."""
    
    @abstractmethod
    def notify(self, vibe: VibeProfile, context: ContextSnapshot) -> Optional[str]:
        """
        Notify the user that a queue is ready.
        
        Returns:
            Notification id, or None if the notification was not sent
        """
        pass


class NullNotifier(Notifier):
    """
    Notifier that never sends anything.
    
    Used when no delivery channel is configured; every call reports "not sent".
    """
    
    def notify(self, vibe: VibeProfile, context: ContextSnapshot) -> Optional[str]:
        logger.debug(f"[NOTIFY] No delivery channel configured, not notifying for {vibe.id}")
        return None


class WebhookNotifier(Notifier):
    """
    Notifier that POSTs the notification to a push gateway webhook.
    
    Payload: {"title", "body", "vibe_id", "data": {"type", "vibe_id", "context_timestamp"}}.
    The gateway may answer with {"id": ...}; otherwise a local id is generated.
    """
    
    def __init__(
        self,
        url: str,
        timeout: float = 5.0,
        rng: Optional[random.Random] = None,
        client: Optional[httpx.Client] = None,
    ):
        """
        Initialize webhook notifier.
        
        Args:
            url: Webhook endpoint
            timeout: Request timeout in seconds
            rng: Random source for notification copy
            client: Optional preconfigured httpx.Client
        """
        self.url = url
        self.timeout = timeout
        self._rng = rng or random.Random()
        self._client = client or httpx.Client(timeout=timeout)
        
        # Suppress httpx INFO level logging
        logging.getLogger("httpx").setLevel(logging.WARNING)
        
        logger.info(f"WebhookNotifier initialized (url={self.url})")
    
    def notify(self, vibe: VibeProfile, context: ContextSnapshot) -> Optional[str]:
        title, body = notification_copy(vibe, self._rng)
        payload = {
            "title": title,
            "body": body,
            "vibe_id": vibe.id,
            "data": {
                "type": "prompted_queue",
                "vibe_id": vibe.id,
                "context_timestamp": context.captured_at.timestamp(),
            },
        }
        
        try:
            response = self._client.post(self.url, json=payload, timeout=self.timeout)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(f"[NOTIFY] Failed to send notification for {vibe.id}: {e}")
            return None
        
        notification_id = None
        try:
            body_json = response.json()
            if isinstance(body_json, dict) and body_json.get("id"):
                notification_id = str(body_json["id"])
        except ValueError:
            logger.debug(f"[NOTIFY] Gateway response for {vibe.id} had no JSON body")
        
        notification_id = notification_id or str(uuid.uuid4())
        logger.info(f"[NOTIFY] Sent '{title}' for {vibe.id} (id={notification_id})")
        return notification_id
    
    def close(self) -> None:
        self._client.close()
