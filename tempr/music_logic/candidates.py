"""
Candidate sourcing boundary for Tempr.

Defines the Track and TasteProfile value types, the CandidateSourcer
contract, and an HTTP implementation that talks to a recommendation
service. Ranking and recommendation live behind this boundary; this
module only moves candidates across it.
"""

import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from tempr.music_logic.vibes import VibeProfile

logger = logging.getLogger(__name__)


class CandidateSourcingError(Exception):
    """Raised when a candidate sourcer cannot produce candidate pools."""


@dataclass(frozen=True)
class Track:
    """
    One candidate track.
    
    Identity for deduplication is `id`; identity for artist diversity is
    `artist_key` (the first credited artist).
    
    Attributes:
        id: Unique, stable track id
        artist_key: First credited artist identity
        duration_ms: Track length in milliseconds (> 0)
        name: Display title
        artist_name: Display artist
    """
    id: str
    artist_key: str
    duration_ms: int
    name: str = ""
    artist_name: str = ""

    def __post_init__(self):
        if self.duration_ms <= 0:
            raise ValueError(f"Track {self.id!r} has non-positive duration_ms={self.duration_ms}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Track":
        artist_key = data.get("artist_key") or data.get("artist_id") or data.get("artist_name") or ""
        return cls(
            id=str(data["id"]),
            artist_key=str(artist_key),
            duration_ms=int(data["duration_ms"]),
            name=str(data.get("name", "")),
            artist_name=str(data.get("artist_name", "")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TasteProfile:
    """What we know about the user's taste (top tracks and artists)."""
    top_tracks: List[Track] = field(default_factory=list)
    top_artists: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TasteProfile":
        return cls(
            top_tracks=[Track.from_dict(t) for t in data.get("top_tracks", [])],
            top_artists=[str(a) for a in data.get("top_artists", [])],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "top_tracks": [t.to_dict() for t in self.top_tracks],
            "top_artists": list(self.top_artists),
        }


@dataclass
class CandidatePools:
    """
    The two unordered candidate pools returned by a sourcer.
    
    Either pool may be empty. `reasoning` is the sourcer's explanation of
    its picks, carried through to the generated queue for display.
    """
    familiar: List[Track] = field(default_factory=list)
    discovery: List[Track] = field(default_factory=list)
    reasoning: str = ""


class CandidateSourcer(ABC):
    """
    Contract for sources of familiar and discovery candidates.
    
    Implementations carry their own timeout policy and must not retry
    silently: any failure is raised and ends the cycle.
    """
    
    @abstractmethod
    def source_candidates(self, mood_description: str, taste: TasteProfile) -> CandidatePools:
        """
        Produce familiar and discovery candidates for a mood.
        
        Args:
            mood_description: Natural-language description of the moment
            taste: User taste data
            
        Returns:
            CandidatePools (pools may be empty)
            
        Raises:
            Exception: Any failure; the orchestrator reports it as generation_error
        """
        pass
    
    def broaden(self, vibe: VibeProfile, taste: TasteProfile) -> List[Track]:
        """
        Return a broader set of discovery candidates when the pools run thin.
        
        The default implementation has nothing broader to offer.
        """
        return []


def _tracks_from_payload(payload: Any, pool: str) -> List[Track]:
    if not isinstance(payload, dict) or not isinstance(payload.get("tracks"), list):
        raise CandidateSourcingError(f"Malformed {pool} response: expected an object with a 'tracks' list")
    tracks: List[Track] = []
    for item in payload["tracks"]:
        try:
            tracks.append(Track.from_dict(item))
        except (KeyError, TypeError, ValueError) as e:
            # One bad row should not sink the whole pool
            logger.debug(f"[SOURCER] Dropping malformed {pool} track {item!r}: {e}")
    return tracks


class HttpCandidateSourcer(CandidateSourcer):
    """
    Candidate sourcer backed by an HTTP recommendation service.
    
    Endpoints (all POST, JSON):
    - {base_url}/candidates/familiar  -> {"tracks": [...], "reasoning": "..."}
    - {base_url}/candidates/discovery -> {"tracks": [...]}
    - {base_url}/candidates/broaden   -> {"tracks": [...]}
    
    The familiar and discovery lookups are independent and read-only, so
    they run concurrently.
    """
    
    def __init__(self, base_url: str, timeout: float = 10.0, client: Optional[httpx.Client] = None):
        """
        Initialize the sourcer.
        
        Args:
            base_url: Recommendation service root URL
            timeout: Per-request timeout in seconds
            client: Optional preconfigured httpx.Client (e.g. with a mock transport)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client or httpx.Client(timeout=timeout)
        
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logger.info(f"HttpCandidateSourcer initialized (url={self.base_url})")
    
    def _post(self, path: str, payload: Dict[str, Any]) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self._client.post(url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as e:
            raise CandidateSourcingError(f"Request to {path} failed: {e}") from e
        except ValueError as e:
            raise CandidateSourcingError(f"Response from {path} was not JSON: {e}") from e
    
    def source_candidates(self, mood_description: str, taste: TasteProfile) -> CandidatePools:
        payload = {"mood": mood_description, "taste": taste.to_dict()}
        
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="tempr-sourcer") as pool:
            familiar_future = pool.submit(self._post, "/candidates/familiar", payload)
            discovery_future = pool.submit(self._post, "/candidates/discovery", payload)
            familiar_payload = familiar_future.result()
            discovery_payload = discovery_future.result()
        
        pools = CandidatePools(
            familiar=_tracks_from_payload(familiar_payload, "familiar"),
            discovery=_tracks_from_payload(discovery_payload, "discovery"),
            reasoning=str(familiar_payload.get("reasoning", "")),
        )
        logger.debug(f"[SOURCER] Sourced {len(pools.familiar)} familiar, {len(pools.discovery)} discovery")
        return pools
    
    def broaden(self, vibe: VibeProfile, taste: TasteProfile) -> List[Track]:
        payload = {
            "vibe_id": vibe.id,
            "mood_targets": asdict(vibe.mood_targets),
            "seed_tracks": [t.id for t in taste.top_tracks[:2]],
            "seed_artists": list(taste.top_artists[:2]),
        }
        return _tracks_from_payload(self._post("/candidates/broaden", payload), "broaden")
    
    def close(self) -> None:
        self._client.close()
