"""
Static mapping tables shared by both schema adapters.

Provider names, API key environment variables and channel policies are
plain lowercase lookup tables; the functions below only normalize the
key and consult them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from .models import CapabilityGrant, ModelRef
from .tool_compat import WILDCARD_TOOL, recognize_tool

DEFAULT_PROVIDER = "anthropic"
DEFAULT_MODEL = "claude-sonnet-4-20250514"
DEFAULT_DECAY_RATE = 0.05
DEFAULT_LISTEN_ADDR = "127.0.0.1:4200"

# Used when neither the agent nor the defaults name any tools
FALLBACK_TOOLS: Tuple[str, ...] = ("file_read", "file_list", "web_fetch")

PROVIDER_ALIASES: Dict[str, str] = {
    "anthropic": "anthropic",
    "claude": "anthropic",
    "openai": "openai",
    "gpt": "openai",
    "groq": "groq",
    "ollama": "ollama",
    "openrouter": "openrouter",
    "deepseek": "deepseek",
    "together": "together",
    "mistral": "mistral",
    "fireworks": "fireworks",
    "google": "google",
    "gemini": "google",
    "xai": "xai",
    "grok": "xai",
    "z.ai": "zai",
    "zai": "zai",
    "z.ai-global": "zai-global",
    "zai-global": "zai-global",
    "zai_global": "zai-global",
    "cerebras": "cerebras",
    "sambanova": "sambanova",
}

PROVIDER_API_KEY_ENV: Dict[str, str] = {
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
    "groq": "GROQ_API_KEY",
    "openrouter": "OPENROUTER_API_KEY",
    "deepseek": "DEEPSEEK_API_KEY",
    "together": "TOGETHER_API_KEY",
    "mistral": "MISTRAL_API_KEY",
    "fireworks": "FIREWORKS_API_KEY",
    "google": "GOOGLE_API_KEY",
    "xai": "XAI_API_KEY",
    "zai": "ZAI_API_KEY",
    "zai-global": "ZAI_GLOBAL_API_KEY",
    "cerebras": "CEREBRAS_API_KEY",
    "sambanova": "SAMBANOVA_API_KEY",
    "ollama": "",  # local, no key
}

# Canonical policy values
RESPOND = "respond"
ALLOWED_ONLY = "allowed_only"
IGNORE = "ignore"
MENTION_ONLY = "mention_only"

DM_POLICY_MAP: Dict[str, str] = {
    "open": RESPOND,
    "allowlist": ALLOWED_ONLY,
    "allow_list": ALLOWED_ONLY,
    "pairing": IGNORE,
    "disabled": IGNORE,
}

# An allowlist group policy restricts replies to allowed senders. OpenClaw
# itself treats it as "respond"; the narrower mapping is deliberate.
GROUP_POLICY_MAP: Dict[str, str] = {
    "open": RESPOND,
    "allowlist": ALLOWED_ONLY,
    "allow_list": ALLOWED_ONLY,
    "mention": MENTION_ONLY,
    "mention_only": MENTION_ONLY,
    "disabled": IGNORE,
}

NETWORK_TOOLS = frozenset({"web_fetch", "web_search", "browser_navigate"})
MESSAGING_TOOLS = frozenset({"agent_send", "agent_list"})


def map_provider(name: str) -> str:
    """Normalize an OpenClaw provider name; unknown names pass through."""
    return PROVIDER_ALIASES.get(name.strip().lower(), name)


def default_api_key_env(provider: str) -> str:
    """API key environment variable for a provider ("" if none is needed)."""
    if provider in PROVIDER_API_KEY_ENV:
        return PROVIDER_API_KEY_ENV[provider]
    return f"{provider.upper().replace('-', '_').replace('.', '_')}_API_KEY"


def split_model_ref(model_ref: str) -> ModelRef:
    """
    Split "provider/model" on the first slash.

    The provider half is normalized, the model half is kept verbatim.
    Without a slash the whole string is the model id of the default
    provider.
    """
    provider, sep, model = model_ref.partition("/")
    if not sep:
        return ModelRef(DEFAULT_PROVIDER, model_ref)
    return ModelRef(map_provider(provider), model)


def map_dm_policy(value: str) -> str:
    return DM_POLICY_MAP.get(value.strip().lower(), RESPOND)


def map_group_policy(value: str) -> str:
    return GROUP_POLICY_MAP.get(value.strip().lower(), RESPOND)


def derive_capabilities(tools: Iterable[str]) -> CapabilityGrant:
    """
    Derive coarse capability grants from a resolved tool list.

    Grants only accumulate: a later, narrower tool never removes what an
    earlier wildcard granted.
    """
    caps = CapabilityGrant()

    for tool in tools:
        if tool == WILDCARD_TOOL:
            caps.shell = [WILDCARD_TOOL]
            caps.network = [WILDCARD_TOOL]
            caps.agent_message = [WILDCARD_TOOL]
            caps.agent_spawn = True
        elif tool == "shell_exec":
            caps.shell = [WILDCARD_TOOL]
        elif tool in NETWORK_TOOLS:
            if not caps.network:
                caps.network = [WILDCARD_TOOL]
        elif tool in MESSAGING_TOOLS:
            if not caps.agent_message:
                caps.agent_message = [WILDCARD_TOOL]
            caps.agent_spawn = True

    return caps


@dataclass
class ToolResolution:
    """Result of mapping a list of source tool names."""
    tools: List[str] = field(default_factory=list)
    unmapped: List[str] = field(default_factory=list)

    def add(self, names: Iterable[str]):
        for name in names:
            canonical = recognize_tool(name)
            if canonical is None:
                self.unmapped.append(name)
            elif canonical not in self.tools:
                self.tools.append(canonical)


def resolve_tool_names(*name_lists: Optional[Iterable[str]]) -> ToolResolution:
    """Map several source tool lists, in order, into one canonical list."""
    resolution = ToolResolution()
    for names in name_lists:
        if names:
            resolution.add(names)
    return resolution


def unmapped_tool_warning(agent_id: str, tool: str) -> str:
    return f"Agent '{agent_id}': tool '{tool}' has no OpenFang equivalent and was skipped"


def default_system_prompt(name: str, description: str = "") -> str:
    """Prompt used when the source agent has no identity of its own."""
    tail = description or "You are helpful, concise, and accurate."
    return f"You are {name}, an AI agent running on the OpenFang Agent OS. {tail}"
