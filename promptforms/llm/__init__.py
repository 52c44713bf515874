"""LLM provider dispatch.

Routes composed prompts to Gemini, OpenAI or DeepSeek behind one
text-generation interface, with a closed provider set and typed errors.
"""

from promptforms.llm.backends import (
    GeminiBackend,
    OpenAIChatBackend,
    TextBackend,
)
from promptforms.llm.dispatcher import (
    Provider,
    ProviderDispatcher,
    ProviderSpec,
    get_provider_spec,
    list_provider_specs,
)
from promptforms.llm.errors import (
    BackendError,
    ExecutionError,
    FormNotFoundError,
    InvalidProviderError,
    MissingCredentialError,
)

__all__ = [
    "GeminiBackend",
    "OpenAIChatBackend",
    "TextBackend",
    "Provider",
    "ProviderDispatcher",
    "ProviderSpec",
    "get_provider_spec",
    "list_provider_specs",
    "BackendError",
    "ExecutionError",
    "FormNotFoundError",
    "InvalidProviderError",
    "MissingCredentialError",
]
