"""Provider registry and selection."""

import logging
from typing import Any, Dict, Optional, Type

from ..config import get_settings
from ..errors import UnknownProviderError
from .base import BaseProvider
from .gemini import GeminiProvider
from .openai_compat import OpenAICompatibleProvider

logger = logging.getLogger("wordflow.providers.router")


PROVIDERS: Dict[str, Type[BaseProvider]] = {
    "gemini": GeminiProvider,
    "openai_compat": OpenAICompatibleProvider,
}

# Names accepted from older clients and configuration files
PROVIDER_ALIASES: Dict[str, str] = {
    "ilmuchat": "openai_compat",
    "openai": "openai_compat",
}


class ProviderRouter:
    """Router for selecting and caching provider instances."""

    def __init__(self):
        self.settings = get_settings()
        self._instances: Dict[str, BaseProvider] = {}
        self.current_provider = self.resolve_name(self.settings.default_provider)

    def resolve_name(self, name: Optional[str]) -> str:
        """
        Map a provider name or alias to a registered name.

        Raises:
            UnknownProviderError: If no provider is registered under that name
        """
        key = (name or "").strip().lower()
        key = PROVIDER_ALIASES.get(key, key)
        if key not in PROVIDERS:
            raise UnknownProviderError(f"Unsupported provider: {name}")
        return key

    def get_provider(self, name: Optional[str] = None, api_key: Optional[str] = None) -> BaseProvider:
        """
        Get a provider instance, creating it on first use.

        Args:
            name: Provider name; the current default when omitted
            api_key: Optional per-user key; gets a separate, uncached instance

        Returns:
            The cached provider instance, or a fresh one bound to ``api_key``
        """
        key = self.resolve_name(name or self.current_provider)
        if api_key:
            return PROVIDERS[key](api_key=api_key)
        if key not in self._instances:
            self._instances[key] = PROVIDERS[key]()
        return self._instances[key]

    def set_provider(self, name: str) -> str:
        """Switch the default provider."""
        self.current_provider = self.resolve_name(name)
        logger.info("Default provider set to %s", self.current_provider)
        return self.current_provider

    def get_available_providers(self) -> Dict[str, Dict[str, Any]]:
        """
        Get information about providers that have credentials configured.

        Returns:
            Dictionary of provider name -> description, model and capabilities
        """
        available = {}
        for key in PROVIDERS:
            provider = self.get_provider(key)
            if not provider.api_key:
                continue
            available[key] = {
                "description": provider.description,
                "model": provider.model,
                "capabilities": sorted(provider.capabilities),
                "default": key == self.current_provider,
            }
        return available

    def validate_provider_availability(self, name: str) -> bool:
        try:
            key = self.resolve_name(name)
        except UnknownProviderError:
            return False
        return key in self.get_available_providers()


_provider_router: Optional[ProviderRouter] = None


def get_provider_router() -> ProviderRouter:
    """Get the global provider router instance."""
    global _provider_router
    if _provider_router is None:
        _provider_router = ProviderRouter()
    return _provider_router
