"""
Adapter for the modern single-file OpenClaw schema (openclaw.json).

The file is JSON5: comments, trailing commas and unquoted keys are all
allowed, so it is decoded with the json5 library rather than json.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import json5

from common.exceptions import AgentConversionError, ConfigParseError

from ..channels import convert_modern_channel
from ..mapping import (
    DEFAULT_MODEL,
    DEFAULT_PROVIDER,
    default_api_key_env,
    default_system_prompt,
    map_provider,
    split_model_ref,
)
from ..models import (
    AgentSpec,
    CanonicalModel,
    DefaultModelConfig,
    ItemKind,
    SecretRecord,
    SourceFormat,
)
from .base import SourceAdapter

logger = logging.getLogger(__name__)

DEFAULT_MODEL_REF = f"{DEFAULT_PROVIDER}/{DEFAULT_MODEL}"

# Top-level sections with no OpenFang counterpart: (key, kind, reason)
UNSUPPORTED_SECTIONS = (
    ("cron", ItemKind.CONFIG,
     "Cron job scheduling not yet supported - use OpenFang's periodic schedules instead"),
    ("hooks", ItemKind.CONFIG,
     "Webhook hooks not supported - use OpenFang's event system instead"),
    ("session", ItemKind.CONFIG,
     "Session scope config differs - OpenFang uses per-agent sessions by default"),
    ("memory", ItemKind.CONFIG,
     "Memory backend config not migrated - OpenFang uses SQLite with vector embeddings"),
)

AUTH_PROFILES_REASON = (
    "Auth profiles (API keys, OAuth tokens) not migrated for security - set env vars manually"
)
SKILL_ENTRIES_REASON = "Skills must be reinstalled via `openfang skill install`"


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _str_items(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


class Json5Adapter(SourceAdapter):
    """Reads openclaw.json (or one of its older product-name aliases)."""

    source_format = SourceFormat.JSON5

    def parse(self) -> CanonicalModel:
        root = self._load()
        model = self._new_model()

        provider_base_urls = self._parse_providers(root, model)
        self._parse_default_model(root, model, provider_base_urls)
        self._parse_channels(root, model)
        self._parse_agents(root, model)
        self._parse_unsupported(root, model)

        logger.info(
            f"Parsed {model.config_name}: {len(model.agents)} agents, "
            f"{len(model.channels)} channels"
        )
        return model

    def _load(self) -> Dict[str, Any]:
        path = self.config_path
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigParseError(path, str(e), cause=e)

        try:
            root = json5.loads(text)
        except ValueError as e:
            raise ConfigParseError(path, str(e), cause=e)

        if not isinstance(root, dict):
            raise ConfigParseError(path, "top-level value is not an object")
        return root

    # ------------------------------------------------------------------
    # Providers and default model
    # ------------------------------------------------------------------

    def _parse_providers(self, root: Dict[str, Any], model: CanonicalModel) -> Dict[str, str]:
        """Quarantine provider API keys; return base URLs keyed by provider."""
        base_urls: Dict[str, str] = {}
        providers = _as_dict(_as_dict(root.get("models")).get("providers"))

        for name, cfg in providers.items():
            if not isinstance(cfg, dict):
                continue
            provider = map_provider(name)

            base_url = cfg.get("baseUrl", cfg.get("base_url"))
            if isinstance(base_url, str) and base_url:
                base_urls[provider] = base_url

            api_key = cfg.get("apiKey", cfg.get("api_key"))
            if not isinstance(api_key, str) or not api_key.strip():
                continue
            env_name = default_api_key_env(provider)
            if not env_name:
                logger.debug(f"Provider {provider} takes no API key, ignoring apiKey")
                continue
            model.provider_secrets.append(SecretRecord(key=env_name, value=api_key))

        return base_urls

    def _parse_default_model(
        self,
        root: Dict[str, Any],
        model: CanonicalModel,
        base_urls: Dict[str, str],
    ):
        defaults = _as_dict(_as_dict(root.get("agents")).get("defaults"))
        try:
            primary = self._primary_ref(defaults.get("model"), "agents.defaults")
        except AgentConversionError as e:
            model.warnings.append(f"agents.defaults: {e.message}, using {DEFAULT_MODEL_REF}")
            primary = None

        ref = split_model_ref(primary or DEFAULT_MODEL_REF)
        model.default_model = DefaultModelConfig(
            model=ref,
            api_key_env=default_api_key_env(ref.provider),
            base_url=base_urls.get(ref.provider),
        )

    @staticmethod
    def _primary_ref(value: Any, owner: str) -> Optional[str]:
        """Primary model ref from the string or {primary, fallbacks} form; "" counts as unset."""
        if value is None:
            return None
        if isinstance(value, str):
            return value or None
        if isinstance(value, dict):
            primary = value.get("primary")
            if primary is None or isinstance(primary, str):
                return primary or None
        raise AgentConversionError(owner, "model must be a string or an object with 'primary'")

    @staticmethod
    def _fallback_refs(value: Any) -> List[str]:
        if isinstance(value, dict):
            return _str_items(value.get("fallbacks"))
        return []

    # ------------------------------------------------------------------
    # Channels
    # ------------------------------------------------------------------

    def _parse_channels(self, root: Dict[str, Any], model: CanonicalModel):
        channels = root.get("channels")
        if channels is None:
            return
        if not isinstance(channels, dict):
            model.warnings.append("'channels' section is not an object and was ignored")
            return

        for name, raw in channels.items():
            self._add_channel(model, convert_modern_channel(name, raw))

    # ------------------------------------------------------------------
    # Agents
    # ------------------------------------------------------------------

    def _parse_agents(self, root: Dict[str, Any], model: CanonicalModel):
        agents = root.get("agents")
        if not isinstance(agents, dict):
            model.warnings.append("No agents section found in openclaw.json")
            return

        defaults = agents.get("defaults")
        if defaults is not None and not isinstance(defaults, dict):
            model.warnings.append("agents.defaults is not an object and was ignored")
        defaults = _as_dict(defaults)

        entries = agents.get("list", [])
        if not isinstance(entries, list):
            model.warnings.append("agents.list is not a list and was ignored")
            return

        for index, entry in enumerate(entries):
            label = f"agents.list[{index}]"
            if not isinstance(entry, dict):
                self._skip(model, ItemKind.AGENT, label, "Agent entry is not an object")
                continue

            agent_id = entry.get("id")
            if not isinstance(agent_id, str) or not agent_id:
                self._skip(model, ItemKind.AGENT, label, "Agent entry has no id")
                continue

            reason = self._check_agent_id(model, agent_id)
            if reason:
                self._skip(model, ItemKind.AGENT, agent_id, reason)
                continue

            try:
                spec = self._convert_agent(model, agent_id, entry, defaults)
            except AgentConversionError as e:
                self._skip(model, ItemKind.AGENT, agent_id, e.message)
                continue

            self._add_agent(model, spec)

    def _convert_agent(
        self,
        model: CanonicalModel,
        agent_id: str,
        entry: Dict[str, Any],
        defaults: Dict[str, Any],
    ) -> AgentSpec:
        name = entry.get("name")
        if not isinstance(name, str) or not name:
            name = agent_id

        # Model and fallbacks
        primary = self._primary_ref(entry.get("model"), agent_id)
        if primary is None:
            try:
                primary = self._primary_ref(defaults.get("model"), agent_id)
            except AgentConversionError:
                primary = None
        ref = split_model_ref(primary or DEFAULT_MODEL_REF)

        fallback_refs = (
            self._fallback_refs(entry.get("model"))
            or self._fallback_refs(defaults.get("model"))
        )
        fallbacks = [split_model_ref(fb) for fb in fallback_refs]

        # Tools
        agent_tools = entry.get("tools")
        if agent_tools is not None and not isinstance(agent_tools, dict):
            raise AgentConversionError(agent_id, "tools must be an object")
        agent_tools = _as_dict(agent_tools)
        tools = self._resolve_tools(model, agent_id, agent_tools, _as_dict(defaults.get("tools")))

        profile = agent_tools.get("profile")

        # System prompt
        identity = entry.get("identity")
        if not isinstance(identity, str) or not identity.strip():
            identity = defaults.get("identity")
        if not isinstance(identity, str) or not identity.strip():
            identity = default_system_prompt(name)

        return AgentSpec(
            id=agent_id,
            name=name,
            model=ref,
            system_prompt=identity,
            fallbacks=fallbacks,
            tools=tools,
            description=f"Migrated from OpenClaw agent '{agent_id}'",
            api_key_env=default_api_key_env(ref.provider) or None,
            profile=profile if isinstance(profile, str) and profile else None,
        )

    def _resolve_tools(
        self,
        model: CanonicalModel,
        agent_id: str,
        agent_tools: Dict[str, Any],
        default_tools: Dict[str, Any],
    ) -> List[str]:
        """
        Resolve an agent's tool list.

        Precedence: agent allow (+ alsoAllow), agent profile, defaults
        profile, defaults allow, then the minimal fallback set.
        """
        allow = agent_tools.get("allow")
        if isinstance(allow, list):
            also_allow = agent_tools.get("alsoAllow", agent_tools.get("also_allow"))
            return self._resolve_allow_lists(
                model, agent_id, _str_items(allow), _str_items(also_allow)
            )

        profile = agent_tools.get("profile")
        if isinstance(profile, str) and profile:
            return self._profile_tools(model, agent_id, profile)

        default_profile = default_tools.get("profile")
        if isinstance(default_profile, str) and default_profile:
            return self._profile_tools(model, agent_id, default_profile)

        default_allow = _str_items(default_tools.get("allow"))
        if default_allow:
            mapped = self._resolve_allow_lists(model, agent_id, default_allow)
            if mapped:
                return mapped

        return self._fallback_tools()

    # ------------------------------------------------------------------
    # Sections with no counterpart
    # ------------------------------------------------------------------

    def _parse_unsupported(self, root: Dict[str, Any], model: CanonicalModel):
        for key, kind, reason in UNSUPPORTED_SECTIONS:
            if root.get(key) is not None:
                self._skip(model, kind, key, reason)

        auth = _as_dict(root.get("auth"))
        if auth.get("profiles") is not None:
            self._skip(model, ItemKind.CONFIG, "auth-profiles", AUTH_PROFILES_REASON)

        entries = _as_dict(root.get("skills")).get("entries")
        if isinstance(entries, (dict, list)) and entries:
            if isinstance(entries, dict):
                model.skills = sorted(entries)
            else:
                model.skills = [str(e) for e in entries if isinstance(e, str)]
            self._skip(
                model, ItemKind.SKILL, f"{len(entries)} skill entries", SKILL_ENTRIES_REASON
            )
