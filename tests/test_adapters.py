"""
Tests for the schema adapters.
"""

import pytest
from pathlib import Path


def _agent(model, agent_id):
    return next(a for a in model.agents if a.id == agent_id)


def _channel(model, name):
    return next(c for c in model.channels if c.name == name)


@pytest.mark.unit
class TestAdapterFactory:
    """Tests for create_adapter."""

    def test_json5(self, json5_home: Path):
        from openclaw_migrate.adapters import create_adapter, Json5Adapter

        adapter = create_adapter(json5_home)
        assert isinstance(adapter, Json5Adapter)
        assert adapter.config_path.name == "openclaw.json"

    def test_legacy(self, legacy_home: Path):
        from openclaw_migrate.adapters import create_adapter, LegacyYamlAdapter

        assert isinstance(create_adapter(legacy_home), LegacyYamlAdapter)

    def test_missing_source(self, tmp_path: Path):
        from common.exceptions import SourceNotFoundError
        from openclaw_migrate.adapters import create_adapter

        with pytest.raises(SourceNotFoundError):
            create_adapter(tmp_path / "missing")

    def test_no_installation(self, tmp_path: Path):
        from common.exceptions import NoInstallationError
        from openclaw_migrate.adapters import create_adapter

        with pytest.raises(NoInstallationError):
            create_adapter(tmp_path)

    @pytest.mark.parametrize("agent_id,ok", [
        ("coder", True),
        ("my agent", True),
        ("", False),
        (".", False),
        ("..", False),
        ("../escape", False),
        ("a\\b", False),
        (" padded", False),
    ])
    def test_safe_agent_id(self, agent_id, ok):
        from openclaw_migrate.adapters import is_safe_agent_id

        assert is_safe_agent_id(agent_id) is ok


@pytest.mark.unit
class TestJson5Adapter:
    """Tests for the openclaw.json adapter."""

    @pytest.fixture
    def model(self, json5_home: Path):
        from openclaw_migrate.adapters import create_adapter

        return create_adapter(json5_home).parse()

    def test_default_model(self, model):
        assert model.default_model.model.provider == "anthropic"
        assert model.default_model.model.model == "claude-sonnet-4-20250514"
        assert model.default_model.api_key_env == "ANTHROPIC_API_KEY"
        assert model.default_model.base_url == "https://api.anthropic.example"
        assert model.decay_rate == 0.05

    def test_provider_secrets(self, model):
        assert [(s.key, s.value) for s in model.provider_secrets] == [
            ("ANTHROPIC_API_KEY", "sk-ant-test-123"),
        ]

    def test_agents_parsed(self, model):
        assert model.agent_ids == ["coder", "researcher", "helper"]

    def test_explicit_tools_and_model(self, model):
        coder = _agent(model, "coder")

        assert coder.name == "Coder"
        assert (coder.model.provider, coder.model.model) == ("deepseek", "deepseek-chat")
        assert coder.api_key_env == "DEEPSEEK_API_KEY"
        assert coder.tools == ["file_read", "shell_exec"]
        assert coder.capabilities.shell == ["*"]
        assert coder.capabilities.network == []
        assert coder.system_prompt == "You write careful, tested code."

    def test_fallbacks_from_defaults(self, model):
        coder = _agent(model, "coder")

        assert [(f.provider, f.model) for f in coder.fallbacks] == [("openai", "gpt-4o")]

    def test_agent_fallbacks_win(self, model):
        researcher = _agent(model, "researcher")

        assert (researcher.model.provider, researcher.model.model) == ("google", "gemini-2.5-pro")
        assert [(f.provider, f.model) for f in researcher.fallbacks] == [("groq", "llama-3.3-70b")]
        assert researcher.tools == ["web_fetch", "web_search", "file_read", "file_write"]
        assert researcher.capabilities.network == ["*"]
        assert researcher.profile == "research"

    def test_defaults_apply(self, model):
        helper = _agent(model, "helper")

        assert helper.name == "helper"
        assert helper.model.model == "claude-sonnet-4-20250514"
        assert helper.tools == ["file_read", "file_write", "file_list", "shell_exec", "web_fetch"]
        assert helper.profile is None
        assert helper.system_prompt.startswith("You are helper, an AI agent running on the OpenFang Agent OS.")

    def test_unmapped_tool_warning(self, model):
        expected = "Agent 'coder': tool 'frobnicate' has no OpenFang equivalent and was skipped"
        assert model.warnings.count(expected) == 1

    def test_bad_entries_skipped(self, model):
        skipped = {s.name: s.reason for s in model.skipped if s.kind.value == "agent"}

        assert skipped["agents.list[3]"] == "Agent entry has no id"
        assert "Duplicate agent id 'coder'" == skipped["coder"]
        assert "../escape" in skipped

    def test_channels_complete(self, model):
        names = [c.name for c in model.channels]
        assert names == [
            "telegram", "discord", "slack", "signal", "matrix", "googleChat",
            "irc", "feishu", "imessage", "mattermost", "rocketchat",
        ]
        emitted = [c.table_name for c in model.channels if c.skip_reason is None]
        assert emitted == [
            "telegram", "discord", "slack", "signal", "matrix", "google_chat", "irc", "feishu",
        ]

    def test_unsupported_sections(self, model):
        skipped = [s.name for s in model.skipped]

        for name in ("cron", "hooks", "session", "memory", "auth-profiles", "2 skill entries"):
            assert name in skipped
        assert model.skills == ["calendar", "weather"]

    def test_no_agents_section(self, tmp_path: Path):
        from openclaw_migrate.adapters import create_adapter

        (tmp_path / "openclaw.json").write_text("{ channels: {} }")
        model = create_adapter(tmp_path).parse()

        assert model.agents == []
        assert "No agents section found in openclaw.json" in model.warnings
        assert model.default_model.model.model == "claude-sonnet-4-20250514"

    def test_empty_agent_model_uses_defaults(self, tmp_path: Path):
        from openclaw_migrate.adapters import create_adapter

        (tmp_path / "openclaw.json").write_text(
            '{agents: {defaults: {model: "openai/gpt-4o"}, list: [{id: "a", model: ""}]}}'
        )
        agent = _agent(create_adapter(tmp_path).parse(), "a")

        assert (agent.model.provider, agent.model.model) == ("openai", "gpt-4o")

    def test_malformed_agent_only_skips_that_agent(self, tmp_path: Path):
        from openclaw_migrate.adapters import create_adapter

        (tmp_path / "openclaw.json").write_text(
            '{agents: {list: [{id: "bad", model: 42}, {id: "good", tools: {allow: []}}]}}'
        )
        model = create_adapter(tmp_path).parse()

        assert model.agent_ids == ["good"]
        assert _agent(model, "good").tools == []
        assert [s.name for s in model.skipped] == ["bad"]

    def test_unknown_profile_warns_and_uses_full(self, tmp_path: Path):
        from openclaw_migrate.adapters import create_adapter

        (tmp_path / "openclaw.json").write_text('{agents: {list: [{id: "a", tools: {profile: "mystery"}}]}}')
        model = create_adapter(tmp_path).parse()

        assert _agent(model, "a").tools == ["*"]
        assert _agent(model, "a").capabilities.agent_spawn is True
        assert any("mystery" in w for w in model.warnings)

    def test_defaults_allow_when_no_profile(self, tmp_path: Path):
        from openclaw_migrate.adapters import create_adapter

        (tmp_path / "openclaw.json").write_text(
            '{agents: {defaults: {tools: {allow: ["Read", "Grep"]}}, list: [{id: "a"}]}}'
        )
        model = create_adapter(tmp_path).parse()

        assert _agent(model, "a").tools == ["file_read", "file_list"]

    def test_minimal_fallback_tools(self, tmp_path: Path):
        from openclaw_migrate.adapters import create_adapter

        (tmp_path / "openclaw.json").write_text('{agents: {list: [{id: "a"}]}}')
        model = create_adapter(tmp_path).parse()

        assert _agent(model, "a").tools == ["file_read", "file_list", "web_fetch"]

    def test_duplicate_channel_alias(self, tmp_path: Path):
        from openclaw_migrate.adapters import create_adapter

        (tmp_path / "openclaw.json").write_text(
            '{channels: {msteams: {appId: "1"}, teams: {appId: "2"}}}'
        )
        model = create_adapter(tmp_path).parse()

        assert _channel(model, "msteams").skip_reason is None
        assert "Duplicate" in _channel(model, "teams").skip_reason

    def test_unparsable_config(self, tmp_path: Path):
        from common.exceptions import ConfigParseError
        from openclaw_migrate.adapters import create_adapter

        (tmp_path / "openclaw.json").write_text("{ agents: [ }")

        with pytest.raises(ConfigParseError):
            create_adapter(tmp_path).parse()

    def test_non_object_config(self, tmp_path: Path):
        from common.exceptions import ConfigParseError
        from openclaw_migrate.adapters import create_adapter

        (tmp_path / "openclaw.json").write_text("[1, 2]")

        with pytest.raises(ConfigParseError):
            create_adapter(tmp_path).parse()


@pytest.mark.unit
class TestLegacyYamlAdapter:
    """Tests for the config.yaml / agents / messaging adapter."""

    @pytest.fixture
    def model(self, legacy_home: Path):
        from openclaw_migrate.adapters import create_adapter

        return create_adapter(legacy_home).parse()

    def test_config(self, model):
        assert model.config_name == "config.yaml"
        assert model.default_model.model.provider == "anthropic"
        assert model.default_model.model.model == "claude-3-5-sonnet"
        assert model.default_model.api_key_env == "MY_ANTHROPIC_KEY"
        assert model.decay_rate == 0.1

    def test_agents(self, model):
        assert model.agent_ids == ["assistant", "ops"]

        assistant = _agent(model, "assistant")
        assert assistant.name == "Assistant"
        assert assistant.description == "General helper"
        assert assistant.tools == ["file_read", "web_search"]
        assert assistant.tags == ["general", "chat"]
        assert assistant.api_key_env == "ANTHROPIC_API_KEY"
        assert assistant.system_prompt == (
            "You are Assistant, an AI agent running on the OpenFang Agent OS. General helper"
        )

    def test_profile_agent_without_key(self, model):
        ops = _agent(model, "ops")

        assert (ops.model.provider, ops.model.model) == ("ollama", "llama3")
        assert ops.api_key_env is None
        assert "shell_exec" in ops.tools
        assert ops.capabilities.shell == ["*"]
        assert ops.system_prompt == "Keep the servers up."

    def test_broken_agent_skipped(self, model):
        broken = [s for s in model.skipped if s.name == "broken"]
        assert len(broken) == 1
        assert broken[0].reason.startswith("Cannot parse agent.yaml")

    def test_unmapped_tool_warning(self, model):
        assert (
            "Agent 'assistant': tool 'unknown_tool' has no OpenFang equivalent and was skipped"
            in model.warnings
        )

    def test_channels(self, model):
        by_name = {c.name: c for c in model.channels}

        assert by_name["telegram"].fields == {
            "bot_token_env": "TG_TOKEN", "allowed_users": ["42"], "default_agent": "assistant",
        }
        assert by_name["slack"].fields == {"bot_token_env": "SLACK_BOT_TOKEN", "default_agent": "ops"}
        assert by_name["msteams"].table_name == "teams"
        assert "macOS-only" in by_name["imessage"].skip_reason
        assert "Unknown channel 'rocketchat'" in by_name["rocketchat"].skip_reason
        assert by_name["discord"].skip_reason.startswith("Cannot parse discord.yaml")
        assert all(not c.secrets for c in model.channels)

    def test_skills(self, model):
        reasons = {s.name: s.reason for s in model.skipped if s.kind.value == "skill"}

        assert reasons["weather"].startswith("Node.js skill")
        assert reasons["odd"] == "Unknown skill format"

    def test_missing_config_yaml(self, tmp_path: Path):
        from openclaw_migrate.adapters import create_adapter

        (tmp_path / "agents" / "a").mkdir(parents=True)
        (tmp_path / "agents" / "a" / "agent.yaml").write_text("name: A\n")
        model = create_adapter(tmp_path).parse()

        assert model.default_model is None
        assert "No config.yaml found in OpenClaw workspace" in model.warnings
        assert model.agent_ids == ["a"]

    def test_unparsable_config_is_fatal(self, tmp_path: Path):
        from common.exceptions import ConfigParseError
        from openclaw_migrate.adapters import create_adapter

        (tmp_path / "config.yaml").write_text("provider: [oops\n")

        with pytest.raises(ConfigParseError):
            create_adapter(tmp_path).parse()
