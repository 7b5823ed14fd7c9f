"""
Target emitter.

Writes the canonical model into the OpenFang layout:

    <target>/config.toml
    <target>/secrets.env
    <target>/credentials/...
    <target>/agents/<id>/agent.toml

TOML is produced with tomli_w so quoting and escaping of user-supplied
strings is handled by the serializer. With materialize=False nothing is
written but every event is still recorded in the report.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Set

import tomli_w

from common.exceptions import MigrationError, SecretStoreError
from common.logging_config import register_secret
from utils.atomic_write import atomic_write_text

from .channels import build_channel_table
from .mapping import DEFAULT_LISTEN_ADDR, default_api_key_env
from .models import (
    AgentSpec,
    CanonicalModel,
    ChannelSpec,
    CredentialBundle,
    ItemKind,
    SecretRecord,
)
from .report import MigrationReport
from .secrets import SECRETS_FILE_NAME, SecretStore, copy_bundle, resolve_bundle_source

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.toml"
MANIFEST_FILE_NAME = "agent.toml"

CONFIG_HEADER = "# OpenFang Agent OS configuration\n# Migrated from OpenClaw\n\n"
NO_CONFIG_REASON = "No config.yaml in source, so there is no config.toml to add the channel to"


def manifest_header(agent_id: str) -> str:
    return f"# OpenFang agent manifest\n# Migrated from OpenClaw agent '{agent_id}'\n\n"


def render_config(model: CanonicalModel, channels: List[ChannelSpec]) -> str:
    """Render config.toml for a model with a default model section."""
    default = model.default_model
    default_model: Dict[str, Any] = {
        "provider": default.model.provider,
        "model": default.model.model,
        "api_key_env": default.api_key_env,
    }
    if default.base_url:
        default_model["base_url"] = default.base_url

    doc: Dict[str, Any] = {
        "default_model": default_model,
        "memory": {"decay_rate": model.decay_rate},
        "network": {"listen_addr": DEFAULT_LISTEN_ADDR},
    }
    if channels:
        doc["channels"] = {spec.table_name: build_channel_table(spec) for spec in channels}

    return CONFIG_HEADER + tomli_w.dumps(doc, multiline_strings=True)


def render_manifest(agent: AgentSpec) -> str:
    """Render agents/<id>/agent.toml."""
    doc: Dict[str, Any] = {
        "name": agent.name,
        "version": "0.1.0",
        "description": agent.description,
        "author": "openfang",
        "module": "builtin:chat",
    }
    if agent.tags:
        doc["tags"] = list(agent.tags)

    model: Dict[str, Any] = {
        "provider": agent.model.provider,
        "model": agent.model.model,
        "system_prompt": agent.system_prompt,
    }
    if agent.api_key_env:
        model["api_key_env"] = agent.api_key_env
    if agent.base_url:
        model["base_url"] = agent.base_url
    doc["model"] = model

    if agent.fallbacks:
        fallbacks = []
        for ref in agent.fallbacks:
            entry = {"provider": ref.provider, "model": ref.model}
            api_key_env = default_api_key_env(ref.provider)
            if api_key_env:
                entry["api_key_env"] = api_key_env
            fallbacks.append(entry)
        doc["fallback_models"] = fallbacks

    caps = agent.capabilities
    capabilities: Dict[str, Any] = {
        "tools": list(agent.tools),
        "memory_read": ["*"],
        "memory_write": ["self.*"],
    }
    if caps.network:
        capabilities["network"] = list(caps.network)
    if caps.shell:
        capabilities["shell"] = list(caps.shell)
    if caps.agent_message:
        capabilities["agent_message"] = list(caps.agent_message)
    if caps.agent_spawn:
        capabilities["agent_spawn"] = True
    if agent.profile:
        capabilities["profile"] = agent.profile
    doc["capabilities"] = capabilities

    return manifest_header(agent.id) + tomli_w.dumps(doc, multiline_strings=True)


class TargetEmitter:
    """
    Writes a canonical model to the target directory.

    Secrets and credential bundles go first so config.toml is only ever
    written once its referenced credentials are in place.
    """

    def __init__(
        self,
        source_dir: Path,
        target_dir: Path,
        report: MigrationReport,
        materialize: bool = True,
    ):
        self.source_dir = Path(source_dir)
        self.target_dir = Path(target_dir)
        self.report = report
        self.materialize = materialize
        self.secret_store = SecretStore(self.target_dir / SECRETS_FILE_NAME)
        self._stored_keys: Set[str] = set()

    def emit(self, model: CanonicalModel):
        """
        Emit everything the model holds.

        Raises:
            MigrationError: If config.toml cannot be written.
        """
        channels = [c for c in model.channels if c.skip_reason is None]

        for secret in model.provider_secrets:
            self.emit_secret(secret)
        for spec in channels:
            for secret in spec.secrets:
                self.emit_secret(secret)
            for bundle in spec.bundles:
                self.emit_bundle(bundle)

        self.emit_config(model, channels)

        for agent in model.agents:
            self.emit_agent(agent)

    # ------------------------------------------------------------------
    # Secrets
    # ------------------------------------------------------------------

    def emit_secret(self, secret: SecretRecord):
        register_secret(secret.value)

        if secret.key in self._stored_keys:
            self.report.warn(f"{secret.key} is set more than once in the source; keeping the first value")
            return

        if self.materialize:
            try:
                self.secret_store.upsert(secret.key, secret.value)
            except SecretStoreError as e:
                self.report.warn(e.message)
                return

        self._stored_keys.add(secret.key)
        self.report.add_imported(ItemKind.SECRET, secret.key, SECRETS_FILE_NAME)

    def emit_bundle(self, bundle: CredentialBundle):
        try:
            source = resolve_bundle_source(bundle, self.source_dir)
        except RuntimeError:
            # ~user form naming an account that does not exist
            self.report.warn(f"Credential path for {bundle.label} not found: {bundle.source}")
            return

        if self.materialize:
            try:
                copy_bundle(bundle, self.source_dir, self.target_dir)
            except FileNotFoundError:
                self.report.warn(f"Credential path for {bundle.label} not found: {source}")
                return
            except OSError as e:
                self.report.warn(f"Failed to copy {bundle.label}: {e}")
                return
        elif not source.exists():
            self.report.warn(f"Credential path for {bundle.label} not found: {source}")
            return

        self.report.add_imported(ItemKind.SECRET, bundle.label, bundle.destination)
        if bundle.reauth_warning:
            self.report.warn(bundle.reauth_warning)

    # ------------------------------------------------------------------
    # config.toml
    # ------------------------------------------------------------------

    def emit_config(self, model: CanonicalModel, channels: List[ChannelSpec]):
        for spec in model.channels:
            if spec.skip_reason is not None:
                self.report.add_skipped(ItemKind.CHANNEL, spec.name, spec.skip_reason)

        if model.default_model is None:
            for spec in channels:
                self.report.add_skipped(ItemKind.CHANNEL, spec.name, NO_CONFIG_REASON)
            return

        path = self.target_dir / CONFIG_FILE_NAME
        if self.materialize:
            try:
                atomic_write_text(path, render_config(model, channels))
            except OSError as e:
                raise MigrationError(
                    f"Failed to write {path}",
                    code="CONFIG_WRITE_FAILED",
                    details={"path": str(path)},
                    cause=e,
                    recoverable=False,
                )

        self.report.add_imported(ItemKind.CONFIG, model.config_name or CONFIG_FILE_NAME, CONFIG_FILE_NAME)
        for spec in channels:
            table = spec.table_name
            self.report.add_imported(ItemKind.CHANNEL, table, f"{CONFIG_FILE_NAME} [channels.{table}]")

        logger.info(f"Migrated {model.config_name} -> {CONFIG_FILE_NAME} ({len(channels)} channels)")

    # ------------------------------------------------------------------
    # Agent manifests
    # ------------------------------------------------------------------

    def emit_agent(self, agent: AgentSpec):
        relative = f"agents/{agent.id}/{MANIFEST_FILE_NAME}"

        if self.materialize:
            try:
                atomic_write_text(self.target_dir / relative, render_manifest(agent))
            except OSError as e:
                self.report.add_skipped(ItemKind.AGENT, agent.id, f"Failed to write manifest: {e}")
                return

        self.report.add_imported(ItemKind.AGENT, agent.id, relative)
        logger.info(f"Migrated agent: {agent.id}")
