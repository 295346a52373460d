"""
Configuration store adapter.

Loads the provider list and orchestration settings from a dict or from a
config directory holding providers.json and settings.json, and hands out
immutable snapshots. Edits replace the snapshot rather than mutating it.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple, Union

from aia_orchestrator.domains.providers import Provider, ensure_single_default
from aia_orchestrator.domains.settings import OrchestrationSettings
from aia_orchestrator.interfaces.providers.config import ConfigurationProvider

logger = logging.getLogger(__name__)

PROVIDERS_FILE = "providers.json"
SETTINGS_FILE = "settings.json"


class ConfigurationStore(ConfigurationProvider):
    """In-memory configuration store holding frozen snapshots."""

    def __init__(
        self,
        providers: Iterable[Union[Provider, Dict[str, Any]]] = (),
        settings: Optional[Union[OrchestrationSettings, Dict[str, Any]]] = None,
    ):
        self._providers = self._coerce_providers(providers)
        if isinstance(settings, OrchestrationSettings):
            self._settings = settings
        else:
            self._settings = OrchestrationSettings(**(settings or {}))

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "ConfigurationStore":
        """Build a store from the "providers" and "settings" sections of a config dict."""
        return cls(
            providers=config.get("providers", []),
            settings=config.get("settings", {}),
        )

    @classmethod
    def from_directory(cls, path: Union[str, Path]) -> "ConfigurationStore":
        """Load providers.json and settings.json from a config directory.

        Missing files fall back to an empty provider list and default settings.
        """
        directory = Path(path)
        providers = cls._read_json(directory / PROVIDERS_FILE, default=[])
        settings = cls._read_json(directory / SETTINGS_FILE, default={})
        logger.info(f"Loaded {len(providers)} providers from {directory}")
        return cls(providers=providers, settings=settings)

    @staticmethod
    def _read_json(path: Path, default):
        if not path.exists():
            logger.debug(f"{path} not found, using defaults")
            return default
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e

    @staticmethod
    def _coerce_providers(providers) -> Tuple[Provider, ...]:
        coerced = tuple(
            p if isinstance(p, Provider) else Provider(**p) for p in providers
        )
        ensure_single_default(coerced)
        ids = [p.id for p in coerced]
        if len(ids) != len(set(ids)):
            raise ValueError("Provider ids must be unique")
        return coerced

    def get_settings(self) -> OrchestrationSettings:
        return self._settings

    def get_providers(self) -> Tuple[Provider, ...]:
        return self._providers

    def replace_providers(self, providers: Iterable[Union[Provider, Dict[str, Any]]]) -> None:
        """Swap in a new provider list."""
        self._providers = self._coerce_providers(providers)

    def set_default_provider(self, provider_id: str) -> None:
        """Flag one provider as default and clear the flag on all others."""
        if not any(p.id == provider_id for p in self._providers):
            raise KeyError(f"Provider '{provider_id}' not found")
        self._providers = tuple(
            p.model_copy(update={"is_default": p.id == provider_id}) for p in self._providers
        )
        logger.info(f"Default provider set to {provider_id}")

    def update_settings(self, **changes: Any) -> OrchestrationSettings:
        """Validate and apply setting changes, returning the new snapshot."""
        self._settings = OrchestrationSettings(**{**self._settings.model_dump(), **changes})
        return self._settings
