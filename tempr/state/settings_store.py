"""
Prompt settings persistence for Tempr.
"""

import logging

from tempr.state.json_store import JsonStateStore
from tempr.trigger_logic.trigger_model import PromptSettings

logger = logging.getLogger(__name__)


class SettingsStore:
    """Stores PromptSettings; stored keys are merged over the defaults on load."""
    
    def __init__(self, store: JsonStateStore):
        self._store = store
    
    def load(self) -> PromptSettings:
        """
        Load settings, falling back to defaults for a missing or invalid file.
        """
        data = self._store.load(default={})
        if not data:
            return PromptSettings()
        try:
            return PromptSettings.from_dict(data)
        except (TypeError, ValueError) as e:
            logger.warning(f"[STATE] Stored prompt settings invalid, using defaults: {e}")
            return PromptSettings()
    
    def save(self, settings: PromptSettings) -> None:
        self._store.save(settings.to_dict())
    
    def update(self, **changes) -> PromptSettings:
        """
        Apply a user change and persist the merged result.
        
        Raises:
            ValueError: If the merged settings are invalid
        """
        merged = self.load().to_dict()
        merged.update(changes)
        settings = PromptSettings.from_dict(merged)
        self.save(settings)
        logger.info(f"[STATE] Prompt settings updated: {sorted(changes)}")
        return settings
