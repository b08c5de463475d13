"""Provider selector — name → configured ProviderAdapter, fail-fast on missing credentials."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Callable, Mapping

from genui_engine.engine.errors import ConfigurationError
from genui_engine.providers.anthropic import DEFAULT_ANTHROPIC_MODEL, AnthropicAdapter
from genui_engine.providers.base import DEFAULT_MAX_TOOL_ROUNDS, ProviderAdapter
from genui_engine.providers.gemini import DEFAULT_GEMINI_MODEL, GeminiAdapter

logger = logging.getLogger(__name__)

# factory(api_key, model, max_tool_rounds) -> adapter
ProviderFactory = Callable[[str, str, int], ProviderAdapter]


@dataclass(frozen=True)
class ProviderSpec:
    credential_env: str
    model_env: str
    default_model: str
    factory: ProviderFactory


def _gemini_factory(api_key: str, model: str, max_tool_rounds: int) -> ProviderAdapter:
    return GeminiAdapter(api_key=api_key, model=model, max_tool_rounds=max_tool_rounds)


def _anthropic_factory(api_key: str, model: str, max_tool_rounds: int) -> ProviderAdapter:
    return AnthropicAdapter(api_key=api_key, model=model, max_tool_rounds=max_tool_rounds)


PROVIDERS: dict[str, ProviderSpec] = {
    "gemini": ProviderSpec("GEMINI_API_KEY", "GEMINI_MODEL", DEFAULT_GEMINI_MODEL, _gemini_factory),
    "anthropic": ProviderSpec("ANTHROPIC_API_KEY", "ANTHROPIC_MODEL", DEFAULT_ANTHROPIC_MODEL, _anthropic_factory),
}

DEFAULT_PROVIDER = "gemini"


class ProviderSelector:
    """Resolves a provider name at request time.

    ``None``, empty and unknown names resolve to ``default``. A provider whose
    credential is absent raises ``ConfigurationError`` before its factory runs.
    """

    def __init__(
        self,
        credentials: Mapping[str, str] | None = None,
        *,
        default: str = DEFAULT_PROVIDER,
        providers: Mapping[str, ProviderSpec] | None = None,
        max_tool_rounds: int = DEFAULT_MAX_TOOL_ROUNDS,
    ) -> None:
        self._env = credentials if credentials is not None else os.environ
        self._providers = dict(providers if providers is not None else PROVIDERS)
        if default not in self._providers:
            raise ConfigurationError(f"Default provider '{default}' is not registered")
        self._default = default
        self._max_tool_rounds = max_tool_rounds

    @property
    def default(self) -> str:
        return self._default

    def resolve_name(self, name: str | None) -> str:
        if name and name in self._providers:
            return name
        if name:
            logger.info("Unknown provider %r; using default %r", name, self._default)
        return self._default

    def available(self) -> list[str]:
        """Providers whose credential is configured."""
        return [n for n, spec in self._providers.items() if self._env.get(spec.credential_env)]

    def get_provider(self, name: str | None = None) -> ProviderAdapter:
        resolved = self.resolve_name(name)
        spec = self._providers[resolved]
        api_key = self._env.get(spec.credential_env)
        if not api_key:
            raise ConfigurationError(f"{spec.credential_env} is not set")
        model = self._env.get(spec.model_env) or spec.default_model
        return spec.factory(api_key, model, self._max_tool_rounds)


def get_provider(name: str | None = None, credentials: Mapping[str, str] | None = None) -> ProviderAdapter:
    """Convenience wrapper over a one-off ``ProviderSelector``."""
    return ProviderSelector(credentials).get_provider(name)
