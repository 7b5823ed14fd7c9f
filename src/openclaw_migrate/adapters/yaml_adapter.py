"""
Adapter for the legacy multi-file OpenClaw layout.

    config.yaml               default model, memory settings
    agents/<id>/agent.yaml    one file per agent
    messaging/<kind>.yaml     one file per channel (env var names only)
    skills/{community,custom} installed skills
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from common.exceptions import ConfigParseError

from ..channels import convert_legacy_channel, lookup_channel_kind
from ..mapping import (
    DEFAULT_DECAY_RATE,
    DEFAULT_MODEL,
    DEFAULT_PROVIDER,
    default_api_key_env,
    default_system_prompt,
    map_provider,
)
from ..models import (
    AgentSpec,
    CanonicalModel,
    ChannelSpec,
    DefaultModelConfig,
    ItemKind,
    ModelRef,
    SourceFormat,
)
from .base import SourceAdapter

logger = logging.getLogger(__name__)

SKILL_SUBDIRS = ("community", "custom")
NODE_SKILL_REASON = "Node.js skill - run with `openfang skill install` after migration"
UNKNOWN_SKILL_REASON = "Unknown skill format"


def _load_yaml(path: Path) -> Any:
    """Parse a YAML file; an empty file yields None."""
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def _opt_str(data: Dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if isinstance(value, (str, int, float)) and not isinstance(value, bool):
        text = str(value)
        return text or None
    return None


class LegacyYamlAdapter(SourceAdapter):
    """Reads the config.yaml / agents / messaging layout."""

    source_format = SourceFormat.LEGACY_YAML

    def parse(self) -> CanonicalModel:
        model = self._new_model()

        self._parse_config(model)
        self._parse_channels(model)
        self._parse_agents(model)
        self._parse_skills(model)

        logger.info(
            f"Parsed legacy layout: {len(model.agents)} agents, "
            f"{len(model.channels)} channels"
        )
        return model

    # ------------------------------------------------------------------
    # config.yaml
    # ------------------------------------------------------------------

    def _parse_config(self, model: CanonicalModel):
        path = self.source_dir / "config.yaml"
        if not path.is_file():
            model.warnings.append("No config.yaml found in OpenClaw workspace")
            return

        try:
            data = _load_yaml(path)
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
            raise ConfigParseError(path, str(e), cause=e)

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigParseError(path, "top-level value is not a mapping")

        provider = map_provider(_opt_str(data, "provider") or DEFAULT_PROVIDER)
        model_id = _opt_str(data, "model") or DEFAULT_MODEL
        api_key_env = _opt_str(data, "api_key_env")
        if api_key_env is None:
            api_key_env = default_api_key_env(provider)

        model.config_name = path.name
        model.default_model = DefaultModelConfig(
            model=ModelRef(provider, model_id),
            api_key_env=api_key_env,
            base_url=_opt_str(data, "base_url"),
        )

        memory = data.get("memory")
        decay_rate = memory.get("decay_rate") if isinstance(memory, dict) else None
        if isinstance(decay_rate, (int, float)) and not isinstance(decay_rate, bool):
            model.decay_rate = float(decay_rate)
        else:
            if decay_rate is not None:
                model.warnings.append(
                    f"config.yaml: memory.decay_rate is not a number, using {DEFAULT_DECAY_RATE}"
                )
            model.decay_rate = DEFAULT_DECAY_RATE

    # ------------------------------------------------------------------
    # messaging/*.yaml
    # ------------------------------------------------------------------

    def _parse_channels(self, model: CanonicalModel):
        messaging_dir = self.source_dir / "messaging"
        if not messaging_dir.is_dir():
            return

        for path in sorted(messaging_dir.glob("*.yaml")):
            stem = path.stem
            try:
                raw = _load_yaml(path)
            except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
                spec = ChannelSpec(
                    name=stem,
                    kind=lookup_channel_kind(stem),
                    skip_reason=f"Cannot parse {path.name}: {e}",
                )
            else:
                spec = convert_legacy_channel(stem, raw)
            self._add_channel(model, spec)

    # ------------------------------------------------------------------
    # agents/<id>/agent.yaml
    # ------------------------------------------------------------------

    def _parse_agents(self, model: CanonicalModel):
        agents_dir = self.source_dir / "agents"
        if not agents_dir.is_dir():
            model.warnings.append("No agents/ directory found")
            return

        for agent_dir in sorted(p for p in agents_dir.iterdir() if p.is_dir()):
            agent_yaml = agent_dir / "agent.yaml"
            if not agent_yaml.is_file():
                continue

            agent_id = agent_dir.name
            reason = self._check_agent_id(model, agent_id)
            if reason:
                self._skip(model, ItemKind.AGENT, agent_id, reason)
                continue

            try:
                data = _load_yaml(agent_yaml)
            except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
                self._skip(model, ItemKind.AGENT, agent_id, f"Cannot parse agent.yaml: {e}")
                continue

            if data is None:
                data = {}
            if not isinstance(data, dict):
                self._skip(model, ItemKind.AGENT, agent_id, "agent.yaml is not a mapping")
                continue

            self._add_agent(model, self._convert_agent(model, agent_id, data))

    def _convert_agent(self, model: CanonicalModel, agent_id: str, data: Dict[str, Any]) -> AgentSpec:
        name = _opt_str(data, "name") or "unnamed"
        description = _opt_str(data, "description") or ""

        tools_raw = data.get("tools")
        tool_names: List[str] = (
            [t for t in tools_raw if isinstance(t, str)] if isinstance(tools_raw, list) else []
        )
        profile = _opt_str(data, "tool_profile")

        if tool_names:
            tools = self._resolve_allow_lists(model, agent_id, tool_names)
        elif profile:
            tools = self._profile_tools(model, agent_id, profile)
        else:
            tools = self._fallback_tools()

        provider = map_provider(_opt_str(data, "provider") or DEFAULT_PROVIDER)
        api_key_env = _opt_str(data, "api_key_env") or default_api_key_env(provider) or None

        tags_raw = data.get("tags")
        tags = [str(t) for t in tags_raw if isinstance(t, str)] if isinstance(tags_raw, list) else []

        return AgentSpec(
            id=agent_id,
            name=name,
            model=ModelRef(provider, _opt_str(data, "model") or DEFAULT_MODEL),
            system_prompt=_opt_str(data, "system_prompt") or default_system_prompt(name, description),
            tools=tools,
            description=description,
            api_key_env=api_key_env,
            base_url=_opt_str(data, "base_url"),
            tags=tags,
        )

    # ------------------------------------------------------------------
    # skills/
    # ------------------------------------------------------------------

    def _parse_skills(self, model: CanonicalModel):
        skills_dir = self.source_dir / "skills"
        if not skills_dir.is_dir():
            return

        for subdir in SKILL_SUBDIRS:
            parent = skills_dir / subdir
            if not parent.is_dir():
                continue
            for skill in sorted(p for p in parent.iterdir() if p.is_dir()):
                model.skills.append(skill.name)
                has_index = (skill / "index.ts").exists() or (skill / "index.js").exists()
                if (skill / "package.json").exists() and has_index:
                    reason = NODE_SKILL_REASON
                else:
                    reason = UNKNOWN_SKILL_REASON
                self._skip(model, ItemKind.SKILL, skill.name, reason)
