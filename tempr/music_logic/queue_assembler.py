"""
Queue Assembly for Tempr.

Deduplicates, diversifies and interleaves the familiar and discovery
candidate pools into one ordered queue converging on a target duration.

Algorithm:
1. Deduplicate each pool by track id (first occurrence wins)
2. Drop discovery tracks whose id is already in the familiar pool
3. Cap artists: at most 2 familiar tracks and 1 discovery track per artist_key
4. Seed with a discovery track (a queue opens with something new),
   or a familiar track if there is no discovery
5. Interleave one familiar then up to two discovery tracks until the
   accumulated duration reaches the target or both pools run out

Assembly is deterministic: the same pools always produce the same queue.
The target duration, not a track-count ratio, is the stopping condition.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from tempr.context_logic.snapshot import ContextSnapshot
from tempr.music_logic.candidates import Track
from tempr.music_logic.vibes import VibeProfile

logger = logging.getLogger(__name__)

MAX_FAMILIAR_PER_ARTIST: int = 2
MAX_DISCOVERY_PER_ARTIST: int = 1
DISCOVERY_PER_FAMILIAR: int = 2

# Below this many candidates (after filtering) a broader pool should be requested
MIN_PRACTICAL_CANDIDATES: int = 5

ORIGIN_FAMILIAR = "familiar"
ORIGIN_DISCOVERY = "discovery"


def dedup_tracks(tracks: Iterable[Track]) -> List[Track]:
    """Remove repeated track ids, keeping the first occurrence."""
    seen = set()
    result = []
    for track in tracks:
        if track.id in seen:
            continue
        seen.add(track.id)
        result.append(track)
    return result


def enforce_artist_diversity(tracks: Iterable[Track], max_per_artist: int) -> List[Track]:
    """Keep at most max_per_artist tracks per artist_key, in pool order."""
    counts = {}
    result = []
    for track in tracks:
        count = counts.get(track.artist_key, 0)
        if count >= max_per_artist:
            continue
        counts[track.artist_key] = count + 1
        result.append(track)
    return result


def prepare_pools(familiar: Sequence[Track], discovery: Sequence[Track]) -> Tuple[List[Track], List[Track]]:
    """
    Apply dedup, cross-pool dedup and the artist caps (steps 1-3).
    
    Args:
        familiar: Raw familiar pool
        discovery: Raw discovery pool
        
    Returns:
        Tuple of (filtered familiar pool, filtered discovery pool)
    """
    familiar_pool = dedup_tracks(familiar)
    discovery_pool = dedup_tracks(discovery)
    
    # Familiar wins on collision
    familiar_ids = {t.id for t in familiar_pool}
    discovery_pool = [t for t in discovery_pool if t.id not in familiar_ids]
    
    familiar_pool = enforce_artist_diversity(familiar_pool, MAX_FAMILIAR_PER_ARTIST)
    discovery_pool = enforce_artist_diversity(discovery_pool, MAX_DISCOVERY_PER_ARTIST)
    return familiar_pool, discovery_pool


@dataclass(frozen=True)
class QueueAssembly:
    """
    Result of assembling candidate pools.
    
    Attributes:
        tracks: Ordered queue (empty only when both filtered pools were empty)
        origins: Pool of origin per track, parallel to tracks
        familiar_count: Number of tracks taken from the familiar pool
        discovery_count: Number of tracks taken from the discovery pool
    """
    tracks: Tuple[Track, ...] = ()
    origins: Tuple[str, ...] = ()
    familiar_count: int = 0
    discovery_count: int = 0

    @property
    def total_duration_ms(self) -> int:
        return sum(t.duration_ms for t in self.tracks)

    @property
    def is_empty(self) -> bool:
        return len(self.tracks) == 0


def assemble_queue(
    familiar: Sequence[Track],
    discovery: Sequence[Track],
    target_duration_ms: int,
) -> QueueAssembly:
    """
    Assemble an ordered queue from familiar and discovery candidates.
    
    Pure function. Returns an empty assembly (not an error) when both
    pools are empty after filtering. Has no minimum-count requirement.
    
    Args:
        familiar: Familiar candidate pool (pool order is preference order)
        discovery: Discovery candidate pool
        target_duration_ms: Duration the queue should reach
        
    Returns:
        QueueAssembly with tracks and per-pool counts
    """
    familiar_pool, discovery_pool = prepare_pools(familiar, discovery)
    
    tracks: List[Track] = []
    origins: List[str] = []
    running_ms = 0
    fi = 0
    di = 0
    
    def place(track: Track, origin: str) -> None:
        nonlocal running_ms
        tracks.append(track)
        origins.append(origin)
        running_ms += track.duration_ms
    
    # Seed
    if discovery_pool:
        place(discovery_pool[di], ORIGIN_DISCOVERY)
        di += 1
    elif familiar_pool:
        place(familiar_pool[fi], ORIGIN_FAMILIAR)
        fi += 1
    
    # Interleave
    while running_ms < target_duration_ms and (fi < len(familiar_pool) or di < len(discovery_pool)):
        if fi < len(familiar_pool):
            place(familiar_pool[fi], ORIGIN_FAMILIAR)
            fi += 1
            if running_ms >= target_duration_ms:
                break
        for _ in range(DISCOVERY_PER_FAMILIAR):
            if di >= len(discovery_pool):
                break
            place(discovery_pool[di], ORIGIN_DISCOVERY)
            di += 1
            if running_ms >= target_duration_ms:
                break
    
    assembly = QueueAssembly(
        tracks=tuple(tracks),
        origins=tuple(origins),
        familiar_count=origins.count(ORIGIN_FAMILIAR),
        discovery_count=origins.count(ORIGIN_DISCOVERY),
    )
    logger.debug(
        f"[QUEUE] Assembled {len(tracks)} tracks ({assembly.familiar_count} familiar, "
        f"{assembly.discovery_count} discovery), {running_ms / 60000:.1f}/"
        f"{target_duration_ms / 60000:.1f} min"
    )
    return assembly


@dataclass(frozen=True)
class GeneratedQueue:
    """
    A queue generated for one prompt cycle.
    
    Immutable after creation; the next cycle supersedes it rather than
    mutating it. Total duration is derived from the tracks.
    """
    tracks: Tuple[Track, ...]
    vibe: VibeProfile
    context: ContextSnapshot
    familiar_count: int
    discovery_count: int
    generated_at: datetime
    reasoning: str = ""
    queue_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @classmethod
    def from_assembly(
        cls,
        assembly: QueueAssembly,
        vibe: VibeProfile,
        context: ContextSnapshot,
        generated_at: Optional[datetime] = None,
        reasoning: str = "",
    ) -> "GeneratedQueue":
        return cls(
            tracks=assembly.tracks,
            vibe=vibe,
            context=context,
            familiar_count=assembly.familiar_count,
            discovery_count=assembly.discovery_count,
            generated_at=generated_at or datetime.now(),
            reasoning=reasoning,
        )

    @property
    def total_duration_ms(self) -> int:
        return sum(t.duration_ms for t in self.tracks)

    @property
    def total_duration_minutes(self) -> int:
        """Total duration rounded to the nearest minute (halves round up)."""
        return int(self.total_duration_ms / 60000 + 0.5)

    @property
    def is_empty(self) -> bool:
        return len(self.tracks) == 0

    def to_dict(self) -> dict:
        return {
            "queue_id": self.queue_id,
            "vibe_id": self.vibe.id,
            "tracks": [t.to_dict() for t in self.tracks],
            "familiar_count": self.familiar_count,
            "discovery_count": self.discovery_count,
            "total_duration_minutes": self.total_duration_minutes,
            "generated_at": self.generated_at.timestamp(),
            "reasoning": self.reasoning,
            "context": self.context.to_dict(),
        }
