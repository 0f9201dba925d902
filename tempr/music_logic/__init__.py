"""
Music Logic module for Tempr.

This package holds the static vibe catalog, the candidate sourcing
boundary and the queue assembly algorithm.
"""

from tempr.music_logic.vibes import VIBE_PROFILES, MoodTargets, VibeProfile, infer_vibe
from tempr.music_logic.candidates import CandidatePools, CandidateSourcer, TasteProfile, Track
from tempr.music_logic.queue_assembler import GeneratedQueue, QueueAssembly, assemble_queue

__all__ = [
    "VIBE_PROFILES",
    "MoodTargets",
    "VibeProfile",
    "infer_vibe",
    "CandidatePools",
    "CandidateSourcer",
    "TasteProfile",
    "Track",
    "GeneratedQueue",
    "QueueAssembly",
    "assemble_queue",
]
