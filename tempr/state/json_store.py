"""
JSON State Storage for Tempr.

Provides atomic, crash-resistant JSON storage for engine state.
"""

import json
import logging
import os
from typing import Any

logger = logging.getLogger(__name__)


class JsonStateStore:
    """
    Simple JSON-based state storage with atomic writes.
    
    Uses a temporary file + atomic rename to ensure crash resistance.
    """
    
    def __init__(self, path: str):
        """
        Initialize state store.
        
        Args:
            path: Path to JSON state file
        """
        self.path = path
        logger.debug(f"JsonStateStore initialized with path: {path}")
    
    def save(self, data: Any) -> None:
        """
        Save a value to the JSON file atomically.
        
        Writes to a temporary file first, then atomically replaces
        the target file to prevent corruption on crashes.
        
        Args:
            data: JSON-serialisable value to save
        """
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        
        tmp = self.path + ".tmp"
        try:
            with open(tmp, "w") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp, self.path)
            logger.debug(f"[STATE] Saved {self.path}")
        except Exception as e:
            logger.error(f"[STATE] Failed to save {self.path}: {e}")
            # Clean up temp file on error
            if os.path.exists(tmp):
                try:
                    os.remove(tmp)
                except OSError as cleanup_error:
                    logger.debug(f"[STATE] Could not remove {tmp}: {cleanup_error}")
            raise
    
    def load(self, default: Any = None) -> Any:
        """
        Load the whole value from the JSON file.
        
        Args:
            default: Returned when the file is missing, unreadable, or holds
                a value of a different JSON type than default (None accepts any)
        
        Returns:
            Stored value, or default
        """
        if not os.path.exists(self.path):
            logger.debug(f"[STATE] No state file found at {self.path}")
            return default
        
        try:
            with open(self.path, "r") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"[STATE] Failed to load {self.path}: {e}")
            return default
        
        if default is not None and not isinstance(data, type(default)):
            logger.warning(
                f"[STATE] Unexpected {type(data).__name__} in {self.path}, "
                f"expected {type(default).__name__}"
            )
            return default
        
        logger.debug(f"[STATE] Loaded {self.path}")
        return data
