"""Provider routing for form execution.

Resolves a form's stored provider identifier to a backend, picks the model
(form override or provider default), resolves the credential, and makes
exactly one backend call. No retries.

Credential policy:
- a non-empty caller credential always wins
- gemini falls back to the configured process default (GEMINI_API_KEY)
- openai and deepseek never fall back
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from promptforms.config import Settings
from promptforms.llm.backends import (
    DEEPSEEK_BASE_URL,
    GeminiBackend,
    OpenAIChatBackend,
    TextBackend,
)
from promptforms.llm.errors import (
    BackendError,
    InvalidProviderError,
    MissingCredentialError,
)

logger = logging.getLogger(__name__)


class Provider(str, Enum):
    """Supported LLM providers."""
    GEMINI = "gemini"
    OPENAI = "openai"
    DEEPSEEK = "deepseek"


@dataclass(frozen=True)
class ProviderSpec:
    """Static routing data for a provider."""

    provider: Provider
    name: str
    default_model: str
    uses_default_credential: bool = False
    suggested_models: tuple[str, ...] = field(default_factory=tuple)


def get_provider_spec(provider: Provider) -> ProviderSpec:
    """Routing data for a provider."""
    if provider is Provider.GEMINI:
        return ProviderSpec(
            provider=provider,
            name="Gemini",
            default_model="gemini-2.5-flash",
            uses_default_credential=True,
            suggested_models=("gemini-2.5-flash", "gemini-3.1-pro-preview"),
        )
    elif provider is Provider.OPENAI:
        return ProviderSpec(
            provider=provider,
            name="OpenAI",
            default_model="gpt-4o",
            suggested_models=("gpt-4o", "gpt-4o-mini"),
        )
    elif provider is Provider.DEEPSEEK:
        return ProviderSpec(
            provider=provider,
            name="DeepSeek",
            default_model="deepseek-chat",
            suggested_models=("deepseek-chat", "deepseek-coder"),
        )
    raise ValueError(f"No routing data for provider: {provider!r}")


def list_provider_specs() -> list[ProviderSpec]:
    return [get_provider_spec(provider) for provider in Provider]


def default_backends() -> dict[Provider, TextBackend]:
    """The production backend for each provider."""
    return {
        Provider.GEMINI: GeminiBackend(),
        Provider.OPENAI: OpenAIChatBackend(label="OpenAI"),
        Provider.DEEPSEEK: OpenAIChatBackend(base_url=DEEPSEEK_BASE_URL, label="DeepSeek"),
    }


class ProviderDispatcher:
    """Routes a composed prompt to the backend for a provider.

    Usage:
        dispatcher = ProviderDispatcher(settings)
        text = await dispatcher.dispatch("openai", "", prompt, credential="sk-...")
    """

    def __init__(
        self,
        settings: Settings,
        backends: Optional[dict[Provider, TextBackend]] = None,
    ):
        """Initialize the dispatcher.

        Args:
            settings: Source of the gemini default credential
            backends: Backend per provider (default: SDK-backed backends)
        """
        self._settings = settings
        self._backends = backends if backends is not None else default_backends()

    def resolve_provider(self, provider_id: Optional[str]) -> Provider:
        """Map a stored identifier to a Provider or raise InvalidProviderError."""
        try:
            return Provider(provider_id)
        except ValueError:
            raise InvalidProviderError(f"Invalid provider: '{provider_id}'") from None

    def resolve_credential(self, spec: ProviderSpec, credential: Optional[str]) -> str:
        """Pick the credential for a call or raise MissingCredentialError."""
        if credential:
            return credential
        if spec.uses_default_credential and self._settings.gemini_api_key:
            return self._settings.gemini_api_key
        raise MissingCredentialError(f"API key for {spec.provider.value} is missing")

    async def dispatch(
        self,
        provider_id: Optional[str],
        model: Optional[str],
        prompt: str,
        credential: Optional[str] = None,
    ) -> str:
        """Generate text for a prompt with the given provider.

        Args:
            provider_id: Stored provider identifier ('gemini', 'openai', 'deepseek')
            model: Model override; empty means the provider default
            prompt: Fully composed prompt
            credential: Caller-supplied API key

        Returns:
            Generated text ("" if the backend returned no content)

        Raises:
            InvalidProviderError: Unknown provider, no backend contacted
            MissingCredentialError: No usable credential, no backend contacted
            BackendError: The backend call failed
        """
        provider = self.resolve_provider(provider_id)
        spec = get_provider_spec(provider)
        api_key = self.resolve_credential(spec, credential)
        resolved_model = model or spec.default_model
        backend = self._backends[provider]

        logger.info(
            f"Dispatching to {spec.name}: model={resolved_model}, "
            f"prompt={len(prompt):,} chars, "
            f"credential={'caller' if credential else 'default'}"
        )

        try:
            return await backend.generate(resolved_model, prompt, api_key)
        except Exception as e:
            logger.error(f"{spec.name} call failed ({type(e).__name__}): {e}")
            raise BackendError(str(e) or f"{spec.name} call failed: {type(e).__name__}") from e
