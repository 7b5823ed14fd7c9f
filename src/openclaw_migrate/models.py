"""
Canonical in-memory model of an OpenClaw installation.

Both schema adapters produce a CanonicalModel; nothing downstream knows
which schema the data came from.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional


class SourceFormat(Enum):
    """Which OpenClaw schema an installation uses."""
    JSON5 = "json5"              # single openclaw.json (modern)
    LEGACY_YAML = "legacy_yaml"  # config.yaml + agents/ + messaging/


class ItemKind(Enum):
    """Kind of a migrated or skipped item."""
    CONFIG = "config"
    AGENT = "agent"
    CHANNEL = "channel"
    SECRET = "secret"
    MEMORY = "memory"
    SESSION = "session"
    WORKSPACE = "workspace"
    SKILL = "skill"


class ChannelKind(Enum):
    """Channel kinds OpenClaw knows about; values are OpenFang table names."""
    TELEGRAM = "telegram"
    DISCORD = "discord"
    SLACK = "slack"
    WHATSAPP = "whatsapp"
    SIGNAL = "signal"
    MATRIX = "matrix"
    GOOGLE_CHAT = "google_chat"
    TEAMS = "teams"
    IRC = "irc"
    MATTERMOST = "mattermost"
    FEISHU = "feishu"
    IMESSAGE = "imessage"
    BLUEBUBBLES = "bluebubbles"


@dataclass
class SkippedItem:
    """Something found in the source that was not migrated."""
    kind: ItemKind
    name: str
    reason: str


@dataclass(frozen=True)
class ModelRef:
    """A resolved provider + model id pair."""
    provider: str
    model: str


@dataclass
class CapabilityGrant:
    """Coarse permissions derived from an agent's tool list."""
    shell: List[str] = field(default_factory=list)
    network: List[str] = field(default_factory=list)
    agent_message: List[str] = field(default_factory=list)
    agent_spawn: bool = False


@dataclass
class AgentSpec:
    """One agent, ready to be written as an OpenFang manifest."""
    id: str
    name: str
    model: ModelRef
    system_prompt: str
    fallbacks: List[ModelRef] = field(default_factory=list)
    tools: List[str] = field(default_factory=list)
    capabilities: CapabilityGrant = field(default_factory=CapabilityGrant)
    description: str = ""
    api_key_env: Optional[str] = None
    base_url: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    profile: Optional[str] = None


@dataclass
class SecretRecord:
    """A credential value destined for the secret store."""
    key: str
    value: str


@dataclass
class CredentialBundle:
    """An opaque credential file or directory copied as-is."""
    label: str               # report name, e.g. "whatsapp/credentials"
    source: Path
    destination: str         # relative to the target directory
    reauth_warning: Optional[str] = None


@dataclass
class ChannelSpec:
    """
    One messaging channel from the source.

    `kind` is None for channels OpenFang has no adapter for; their raw
    data is kept in `extra` for reporting. A set `skip_reason` means the
    channel is reported as skipped instead of emitted.
    """
    name: str
    kind: Optional[ChannelKind] = None
    enabled: bool = True
    fields: Dict[str, Any] = field(default_factory=dict)
    secrets: List[SecretRecord] = field(default_factory=list)
    bundles: List[CredentialBundle] = field(default_factory=list)
    dm_policy: Optional[str] = None
    group_policy: Optional[str] = None
    allow_from: List[str] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)
    skip_reason: Optional[str] = None

    @property
    def table_name(self) -> str:
        """Key under [channels] in config.toml."""
        return self.kind.value if self.kind else self.name


@dataclass
class DefaultModelConfig:
    """Process-wide default model section."""
    model: ModelRef
    api_key_env: str
    base_url: Optional[str] = None


@dataclass
class CanonicalModel:
    """Everything parsed from one OpenClaw installation."""
    source_dir: Path
    source_format: SourceFormat
    config_name: Optional[str] = None   # source file the config came from
    default_model: Optional[DefaultModelConfig] = None
    decay_rate: float = 0.05
    agents: List[AgentSpec] = field(default_factory=list)
    channels: List[ChannelSpec] = field(default_factory=list)
    provider_secrets: List[SecretRecord] = field(default_factory=list)
    skills: List[str] = field(default_factory=list)

    # Events raised while parsing, copied into the report
    skipped: List[SkippedItem] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def agent_ids(self) -> List[str]:
        return [agent.id for agent in self.agents]
