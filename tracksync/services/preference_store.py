"""User settings access and remembered per-domain language choices.

The settings store itself belongs to the host; this module defines the
interface the core reads through, an in-memory implementation, and the
``PreferenceStore`` that owns the remembered-languages map.
"""

import abc
import copy
import logging
from typing import Any

from tracksync.models.video_data import NO_TRACK

logger = logging.getLogger(__name__)

LAST_LANGUAGES_SYNCED_KEY = "streamingLastLanguagesSynced"
AUTO_SYNC_KEY = "streamingAutoSync"


class SettingsStore(abc.ABC):
    """Host settings persistence."""

    @abc.abstractmethod
    async def get_single(self, key: str) -> Any:
        pass

    @abc.abstractmethod
    async def set(self, values: dict[str, Any]) -> None:
        pass

    @abc.abstractmethod
    async def profiles(self) -> list[dict[str, Any]]:
        pass

    @abc.abstractmethod
    async def active_profile(self) -> dict[str, Any] | None:
        pass

    @abc.abstractmethod
    async def set_active_profile(self, name: str | None) -> None:
        pass


class InMemorySettingsStore(SettingsStore):
    """Dict-backed store for tests and embedded hosts."""

    def __init__(
        self,
        values: dict[str, Any] | None = None,
        profiles: list[dict[str, Any]] | None = None,
        active_profile: str | None = None,
    ):
        self.values: dict[str, Any] = dict(values or {})
        self._profiles = list(profiles or [])
        self._active_profile = active_profile

    async def get_single(self, key: str) -> Any:
        return self.values.get(key)

    async def set(self, values: dict[str, Any]) -> None:
        self.values.update(copy.deepcopy(values))

    async def profiles(self) -> list[dict[str, Any]]:
        return list(self._profiles)

    async def active_profile(self) -> dict[str, Any] | None:
        if self._active_profile is None:
            return None
        for profile in self._profiles:
            if profile.get("name") == self._active_profile:
                return profile
        return {"name": self._active_profile}

    async def set_active_profile(self, name: str | None) -> None:
        self._active_profile = name


class PreferenceStore:
    """Remembered subtitle languages, one list per domain.

    A ``"-"`` entry means the user deliberately chose no track for that slot.
    """

    def __init__(self, settings_store: SettingsStore):
        self._settings_store = settings_store
        self._languages: dict[str, list[str]] = {}

    def load(self, languages: dict[str, list[str]] | None) -> None:
        """Replace the whole map, e.g. after a settings update."""
        self._languages = {domain: list(langs) for domain, langs in (languages or {}).items()}

    def languages_for(self, domain: str) -> list[str]:
        return list(self._languages.get(domain, []))

    def snapshot(self) -> dict[str, list[str]]:
        return {domain: list(langs) for domain, langs in self._languages.items()}

    async def remember(self, domain: str, languages: list[str | None]) -> list[str]:
        """Store the languages confirmed for ``domain`` and persist the map.

        Tracks without a language are skipped. A failed write is logged and
        the in-memory choice is kept.

        Returns:
            The languages stored for the domain
        """
        remembered = [language for language in languages if language is not None]
        self._languages[domain] = remembered

        try:
            await self._settings_store.set({LAST_LANGUAGES_SYNCED_KEY: self.snapshot()})
        except Exception as e:
            logger.warning(f"Failed to persist remembered languages for {domain}: {e}")
        else:
            chosen = [lang for lang in remembered if lang != NO_TRACK]
            logger.info(f"Remembered languages for {domain}: {chosen or 'none'}")

        return remembered
