"""
Messaging channel conversion.

Each recognized channel kind has one converter per source schema. A
converter reads the raw source mapping and fills a ChannelSpec with the
destination's identifying fields, the secrets to quarantine and any
credential bundles to copy. Policies are kept raw on the ChannelSpec and mapped
when the channel table is built.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

from .mapping import map_dm_policy, map_group_policy
from .models import ChannelKind, ChannelSpec, CredentialBundle, SecretRecord

logger = logging.getLogger(__name__)

# Source keys (modern) and file stems (legacy) for each channel kind
CHANNEL_ALIASES: Dict[str, ChannelKind] = {
    "telegram": ChannelKind.TELEGRAM,
    "discord": ChannelKind.DISCORD,
    "slack": ChannelKind.SLACK,
    "whatsapp": ChannelKind.WHATSAPP,
    "signal": ChannelKind.SIGNAL,
    "matrix": ChannelKind.MATRIX,
    "googlechat": ChannelKind.GOOGLE_CHAT,
    "googleChat": ChannelKind.GOOGLE_CHAT,
    "google_chat": ChannelKind.GOOGLE_CHAT,
    "msteams": ChannelKind.TEAMS,
    "msTeams": ChannelKind.TEAMS,
    "teams": ChannelKind.TEAMS,
    "irc": ChannelKind.IRC,
    "mattermost": ChannelKind.MATTERMOST,
    "feishu": ChannelKind.FEISHU,
    "imessage": ChannelKind.IMESSAGE,
    "bluebubbles": ChannelKind.BLUEBUBBLES,
}

# Recognized kinds that have no OpenFang adapter
UNSUPPORTED_CHANNELS: Dict[ChannelKind, str] = {
    ChannelKind.IMESSAGE: "macOS-only channel - requires manual setup on the target Mac",
    ChannelKind.BLUEBUBBLES: (
        "No OpenFang adapter available - consider using the iMessage channel instead"
    ),
}

WHATSAPP_REAUTH_WARNING = (
    "WhatsApp Baileys credentials copied - you may need to re-authenticate"
)

DISABLED_REASON = "disabled in source"
NOT_AN_OBJECT_REASON = "channel configuration is not an object"


def unknown_channel_reason(name: str) -> str:
    return f"Unknown channel '{name}' - not mapped to any OpenFang adapter"


def lookup_channel_kind(name: str) -> Optional[ChannelKind]:
    return CHANNEL_ALIASES.get(name)


# =============================================================================
# Raw value helpers
# =============================================================================

def _get(raw: Mapping[str, Any], camel: str, snake: Optional[str] = None) -> Any:
    """Read a camelCase key, falling back to its snake_case spelling."""
    if camel in raw:
        return raw[camel]
    if snake and snake in raw:
        return raw[snake]
    return None


def _str(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list)):
        return None
    if isinstance(value, bool):
        return None
    return str(value)


def _str_list(value: Any) -> List[str]:
    """Coerce a list of scalars (user ids may be numbers) to strings."""
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if isinstance(item, (str, int)) and not isinstance(item, bool)]


def _add_secret(spec: ChannelSpec, key: str, value: Any):
    """Queue a secret for the store; empty values are ignored."""
    text = _str(value)
    if text and text.strip():
        spec.secrets.append(SecretRecord(key=key, value=text))


def _read_policies(spec: ChannelSpec, raw: Mapping[str, Any],
                   group: bool = True, allow: bool = True):
    spec.dm_policy = _str(_get(raw, "dmPolicy", "dm_policy"))
    if group:
        spec.group_policy = _str(_get(raw, "groupPolicy", "group_policy"))
    if allow:
        spec.allow_from = _str_list(_get(raw, "allowFrom", "allow_from"))


# =============================================================================
# Modern (JSON5) converters
# =============================================================================

def _modern_telegram(spec: ChannelSpec, raw: Mapping[str, Any]):
    _add_secret(spec, "TELEGRAM_BOT_TOKEN", _get(raw, "botToken", "bot_token"))
    spec.fields["bot_token_env"] = "TELEGRAM_BOT_TOKEN"
    _read_policies(spec, raw)
    if spec.allow_from:
        spec.fields["allowed_users"] = list(spec.allow_from)


def _modern_discord(spec: ChannelSpec, raw: Mapping[str, Any]):
    _add_secret(spec, "DISCORD_BOT_TOKEN", _get(raw, "token"))
    spec.fields["bot_token_env"] = "DISCORD_BOT_TOKEN"
    _read_policies(spec, raw)


def _modern_slack(spec: ChannelSpec, raw: Mapping[str, Any]):
    _add_secret(spec, "SLACK_BOT_TOKEN", _get(raw, "botToken", "bot_token"))
    _add_secret(spec, "SLACK_APP_TOKEN", _get(raw, "appToken", "app_token"))
    spec.fields["bot_token_env"] = "SLACK_BOT_TOKEN"
    spec.fields["app_token_env"] = "SLACK_APP_TOKEN"
    _read_policies(spec, raw)


def _modern_whatsapp(spec: ChannelSpec, raw: Mapping[str, Any]):
    auth_dir = _str(_get(raw, "authDir", "auth_dir"))
    if auth_dir:
        spec.bundles.append(CredentialBundle(
            label="whatsapp/credentials",
            source=Path(auth_dir),
            destination="credentials/whatsapp",
            reauth_warning=WHATSAPP_REAUTH_WARNING,
        ))
    spec.fields["access_token_env"] = "WHATSAPP_ACCESS_TOKEN"
    _read_policies(spec, raw)
    if spec.allow_from:
        spec.fields["allowed_users"] = list(spec.allow_from)


def _modern_signal(spec: ChannelSpec, raw: Mapping[str, Any]):
    api_url = _str(_get(raw, "httpUrl", "http_url"))
    if not api_url:
        host = _str(_get(raw, "httpHost", "http_host")) or "localhost"
        port = _str(_get(raw, "httpPort", "http_port")) or "8080"
        api_url = f"http://{host}:{port}"
    spec.fields["api_url"] = api_url
    account = _str(_get(raw, "account"))
    if account:
        spec.fields["phone_number"] = account
    _read_policies(spec, raw, group=False)


def _modern_matrix(spec: ChannelSpec, raw: Mapping[str, Any]):
    _add_secret(spec, "MATRIX_ACCESS_TOKEN", _get(raw, "accessToken", "access_token"))
    spec.fields["access_token_env"] = "MATRIX_ACCESS_TOKEN"
    homeserver = _str(_get(raw, "homeserver"))
    if homeserver:
        spec.fields["homeserver_url"] = homeserver
    user_id = _str(_get(raw, "userId", "user_id"))
    if user_id:
        spec.fields["user_id"] = user_id
    rooms = _str_list(_get(raw, "rooms"))
    if rooms:
        spec.fields["rooms"] = rooms
    _read_policies(spec, raw, group=False)


def _modern_google_chat(spec: ChannelSpec, raw: Mapping[str, Any]):
    sa_file = _str(_get(raw, "serviceAccountFile", "service_account_file"))
    if sa_file:
        spec.bundles.append(CredentialBundle(
            label="google_chat/service_account",
            source=Path(sa_file),
            destination="credentials/google_chat_sa.json",
        ))
    spec.fields["service_account_env"] = "GOOGLE_CHAT_SA_FILE"
    _read_policies(spec, raw, group=False, allow=False)


def _modern_teams(spec: ChannelSpec, raw: Mapping[str, Any]):
    _add_secret(spec, "TEAMS_APP_PASSWORD", _get(raw, "appPassword", "app_password"))
    spec.fields["app_password_env"] = "TEAMS_APP_PASSWORD"
    app_id = _str(_get(raw, "appId", "app_id"))
    if app_id:
        spec.fields["app_id"] = app_id
    tenant_id = _str(_get(raw, "tenantId", "tenant_id"))
    if tenant_id:
        spec.fields["tenant_id"] = tenant_id
    _read_policies(spec, raw, group=False)


def _modern_irc(spec: ChannelSpec, raw: Mapping[str, Any]):
    password = _get(raw, "password")
    _add_secret(spec, "IRC_PASSWORD", password)
    host = _str(_get(raw, "host"))
    if host:
        spec.fields["server"] = host
    port = _get(raw, "port")
    if isinstance(port, int) and not isinstance(port, bool):
        spec.fields["port"] = port
    nick = _str(_get(raw, "nick"))
    if nick:
        spec.fields["nickname"] = nick
    tls = _get(raw, "tls")
    if isinstance(tls, bool):
        spec.fields["use_tls"] = tls
    if spec.secrets:
        spec.fields["password_env"] = "IRC_PASSWORD"
    channels = _str_list(_get(raw, "channels"))
    if channels:
        spec.fields["channels"] = channels
    _read_policies(spec, raw, group=False)


def _modern_mattermost(spec: ChannelSpec, raw: Mapping[str, Any]):
    _add_secret(spec, "MATTERMOST_TOKEN", _get(raw, "botToken", "bot_token"))
    spec.fields["bot_token_env"] = "MATTERMOST_TOKEN"
    base_url = _str(_get(raw, "baseUrl", "base_url"))
    if base_url:
        spec.fields["server_url"] = base_url
    _read_policies(spec, raw, group=False)


def _modern_feishu(spec: ChannelSpec, raw: Mapping[str, Any]):
    _add_secret(spec, "FEISHU_APP_SECRET", _get(raw, "appSecret", "app_secret"))
    spec.fields["app_secret_env"] = "FEISHU_APP_SECRET"
    app_id = _str(_get(raw, "appId", "app_id"))
    if app_id:
        spec.fields["app_id"] = app_id
    domain = _str(_get(raw, "domain"))
    if domain:
        spec.fields["domain"] = domain
    _read_policies(spec, raw, group=False, allow=False)


ChannelConverter = Callable[[ChannelSpec, Mapping[str, Any]], None]

MODERN_CONVERTERS: Dict[ChannelKind, ChannelConverter] = {
    ChannelKind.TELEGRAM: _modern_telegram,
    ChannelKind.DISCORD: _modern_discord,
    ChannelKind.SLACK: _modern_slack,
    ChannelKind.WHATSAPP: _modern_whatsapp,
    ChannelKind.SIGNAL: _modern_signal,
    ChannelKind.MATRIX: _modern_matrix,
    ChannelKind.GOOGLE_CHAT: _modern_google_chat,
    ChannelKind.TEAMS: _modern_teams,
    ChannelKind.IRC: _modern_irc,
    ChannelKind.MATTERMOST: _modern_mattermost,
    ChannelKind.FEISHU: _modern_feishu,
}


def convert_modern_channel(name: str, raw: Any) -> ChannelSpec:
    """
    Convert one entry of the JSON5 `channels` section.

    Never raises for bad data: anything that cannot be converted comes
    back with `skip_reason` set so the channel still shows up in the
    report exactly once.
    """
    kind = lookup_channel_kind(name)
    spec = ChannelSpec(name=name, kind=kind)

    if not isinstance(raw, dict):
        spec.skip_reason = NOT_AN_OBJECT_REASON
        return spec

    if kind is None:
        spec.extra = dict(raw)
        spec.skip_reason = unknown_channel_reason(name)
        return spec

    if raw.get("enabled", True) is False:
        spec.enabled = False
        spec.skip_reason = DISABLED_REASON
        return spec

    if kind in UNSUPPORTED_CHANNELS:
        spec.skip_reason = UNSUPPORTED_CHANNELS[kind]
        return spec

    MODERN_CONVERTERS[kind](spec, raw)
    return spec


# =============================================================================
# Legacy (YAML) converters
# =============================================================================
# Legacy channel files only ever name environment variables, so nothing
# here produces secrets.

def _legacy_env(raw: Mapping[str, Any], key: str, default: Optional[str]) -> Optional[str]:
    return _str(raw.get(key)) or default


def _legacy_default_agent(spec: ChannelSpec, raw: Mapping[str, Any]):
    agent = _str(raw.get("default_agent"))
    if agent:
        spec.fields["default_agent"] = agent


def _legacy_telegram(spec: ChannelSpec, raw: Mapping[str, Any]):
    spec.fields["bot_token_env"] = _legacy_env(raw, "bot_token_env", "TELEGRAM_BOT_TOKEN")
    users = _str_list(raw.get("allowed_users"))
    if users:
        spec.fields["allowed_users"] = users
    _legacy_default_agent(spec, raw)


def _legacy_discord(spec: ChannelSpec, raw: Mapping[str, Any]):
    spec.fields["bot_token_env"] = _legacy_env(raw, "bot_token_env", "DISCORD_BOT_TOKEN")
    _legacy_default_agent(spec, raw)


def _legacy_slack(spec: ChannelSpec, raw: Mapping[str, Any]):
    spec.fields["bot_token_env"] = _legacy_env(raw, "bot_token_env", "SLACK_BOT_TOKEN")
    app_token_env = _legacy_env(raw, "app_token_env", None)
    if app_token_env:
        spec.fields["app_token_env"] = app_token_env
    _legacy_default_agent(spec, raw)


def _legacy_whatsapp(spec: ChannelSpec, raw: Mapping[str, Any]):
    spec.fields["access_token_env"] = _legacy_env(raw, "access_token_env", "WHATSAPP_ACCESS_TOKEN")


def _legacy_signal(spec: ChannelSpec, raw: Mapping[str, Any]):
    spec.fields["api_url"] = "http://localhost:8080"


def _legacy_matrix(spec: ChannelSpec, raw: Mapping[str, Any]):
    spec.fields["access_token_env"] = _legacy_env(raw, "access_token_env", "MATRIX_ACCESS_TOKEN")


def _legacy_irc(spec: ChannelSpec, raw: Mapping[str, Any]):
    password_env = _legacy_env(raw, "bot_token_env", None)
    if password_env:
        spec.fields["password_env"] = password_env


def _legacy_mattermost(spec: ChannelSpec, raw: Mapping[str, Any]):
    spec.fields["bot_token_env"] = _legacy_env(raw, "bot_token_env", "MATTERMOST_TOKEN")


def _legacy_feishu(spec: ChannelSpec, raw: Mapping[str, Any]):
    spec.fields["app_secret_env"] = "FEISHU_APP_SECRET"


def _legacy_google_chat(spec: ChannelSpec, raw: Mapping[str, Any]):
    spec.fields["service_account_env"] = "GOOGLE_CHAT_SA_FILE"


def _legacy_teams(spec: ChannelSpec, raw: Mapping[str, Any]):
    spec.fields["app_password_env"] = "TEAMS_APP_PASSWORD"


LEGACY_CONVERTERS: Dict[ChannelKind, ChannelConverter] = {
    ChannelKind.TELEGRAM: _legacy_telegram,
    ChannelKind.DISCORD: _legacy_discord,
    ChannelKind.SLACK: _legacy_slack,
    ChannelKind.WHATSAPP: _legacy_whatsapp,
    ChannelKind.SIGNAL: _legacy_signal,
    ChannelKind.MATRIX: _legacy_matrix,
    ChannelKind.GOOGLE_CHAT: _legacy_google_chat,
    ChannelKind.TEAMS: _legacy_teams,
    ChannelKind.IRC: _legacy_irc,
    ChannelKind.MATTERMOST: _legacy_mattermost,
    ChannelKind.FEISHU: _legacy_feishu,
}


def convert_legacy_channel(stem: str, raw: Any) -> ChannelSpec:
    """Convert one parsed `messaging/<stem>.yaml` file."""
    kind = lookup_channel_kind(stem)
    spec = ChannelSpec(name=stem, kind=kind)

    if kind is None:
        spec.skip_reason = unknown_channel_reason(stem)
        return spec

    if kind in UNSUPPORTED_CHANNELS:
        spec.skip_reason = UNSUPPORTED_CHANNELS[kind]
        return spec

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        spec.skip_reason = NOT_AN_OBJECT_REASON
        return spec

    if raw.get("enabled", True) is False:
        spec.enabled = False
        spec.skip_reason = DISABLED_REASON
        return spec

    LEGACY_CONVERTERS[kind](spec, raw)
    return spec


# =============================================================================
# Destination table
# =============================================================================

def build_channel_table(spec: ChannelSpec) -> Dict[str, Any]:
    """
    Build the `[channels.<kind>]` table for a converted channel.

    An `overrides` sub-table is added only when the source set a DM
    policy, a group policy, or a non-empty allow list.
    """
    table: Dict[str, Any] = dict(spec.fields)

    if spec.dm_policy is not None or spec.group_policy is not None or spec.allow_from:
        overrides: Dict[str, Any] = {}
        if spec.dm_policy is not None:
            overrides["dm_policy"] = map_dm_policy(spec.dm_policy)
        if spec.group_policy is not None:
            overrides["group_policy"] = map_group_policy(spec.group_policy)
        if spec.allow_from:
            overrides["allowed_users"] = list(spec.allow_from)
        table["overrides"] = overrides

    return table
