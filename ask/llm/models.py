import logging
from dataclasses import dataclass, field
from typing import Literal, cast, get_args

logger = logging.getLogger(__name__)

# built-in providers
ProviderName = Literal[
    "anthropic",
    "openai",
    "xai",
    "gemini",
    "ollama",
]
PROVIDERS: list[ProviderName] = cast(list[ProviderName], get_args(ProviderName))


@dataclass(frozen=True)
class FeatureFlags:
    """Optional capabilities a request may ask for."""

    thinking: bool = False
    web_search: bool = False


@dataclass(frozen=True)
class RemoteModel:
    """A model as reported by a provider's API. Only used for listing."""

    id: str
    name: str | None = None

    def __str__(self) -> str:
        if self.name and self.name != self.id:
            return f"{self.id} ({self.name})"
        return self.id


@dataclass(frozen=True)
class ProviderInfo:
    name: str
    # empty means no API key is required (e.g. a local server)
    env_key: str
    default_model: str
    # alias -> model ID, in display order
    aliases: dict[str, str] = field(default_factory=dict, hash=False)
    base_url: str | None = None
    supports_thinking: bool = False
    supports_web_search: bool = False


# https://docs.anthropic.com/en/docs/about-claude/models
ANTHROPIC = ProviderInfo(
    name="anthropic",
    env_key="ANTHROPIC_API_KEY",
    default_model="sonnet",
    aliases={
        "sonnet": "claude-sonnet-4-5-20250929",
        "opus": "claude-opus-4-5-20251101",
        "haiku": "claude-haiku-4-5-20251001",
    },
    supports_thinking=True,
    supports_web_search=True,
)

OPENAI = ProviderInfo(
    name="openai",
    env_key="OPENAI_API_KEY",
    default_model="gpt4o",
    aliases={
        "gpt4o": "gpt-4o",
        "gpt4o-mini": "gpt-4o-mini",
        "o3-mini": "o3-mini",
        "o4-mini": "o4-mini",
    },
    base_url="https://api.openai.com/v1",
    supports_web_search=True,
)

XAI = ProviderInfo(
    name="xai",
    env_key="XAI_API_KEY",
    default_model="grok3",
    aliases={
        "grok3": "grok-3-latest",
        "grok3-mini": "grok-3-mini-latest",
    },
    base_url="https://api.x.ai/v1",
)

OLLAMA = ProviderInfo(
    name="ollama",
    env_key="",
    default_model="llama3",
    aliases={
        "llama3": "llama3",
        "qwen": "qwen3",
        "deepseek": "deepseek-r1",
    },
    base_url="http://localhost:11434/v1",
)

GEMINI = ProviderInfo(
    name="gemini",
    env_key="GEMINI_API_KEY",
    default_model="flash",
    aliases={
        "flash": "gemini-2.5-flash",
        "pro": "gemini-2.5-pro",
        "flash-lite": "gemini-2.0-flash-lite",
    },
    supports_thinking=True,
    supports_web_search=True,
)

# OpenAI only lists a lot of non-chat models (embeddings, tts, ...)
OPENAI_CHAT_PREFIXES = ("gpt-", "o1", "o3", "o4", "chatgpt")
