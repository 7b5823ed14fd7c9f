"""
Pytest configuration and shared fixtures for openclaw-migrate tests.

Provides sample OpenClaw installations in both source schemas.
"""

import os
import pytest
from pathlib import Path
from typing import Generator
import sys

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


OPENCLAW_JSON5 = """\
// OpenClaw configuration
{
  models: {
    providers: {
      anthropic: { apiKey: "sk-ant-test-123", baseUrl: "https://api.anthropic.example" },
      ollama: { apiKey: "unused" },
    },
  },
  agents: {
    defaults: {
      model: { primary: "anthropic/claude-sonnet-4-20250514", fallbacks: ["openai/gpt-4o"] },
      tools: { profile: "coding" },
    },
    list: [
      {
        id: "coder",
        name: "Coder",
        model: "deepseek/deepseek-chat",
        tools: { allow: ["Read", "Bash", "frobnicate"] },
        identity: "You write careful, tested code.",
      },
      {
        id: "researcher",
        model: { primary: "gemini/gemini-2.5-pro", fallbacks: ["groq/llama-3.3-70b"] },
        tools: { profile: "research" },
      },
      { id: "helper" },
      { name: "no id here" },
      { id: "coder" },
      { id: "../escape" },
    ],
  },
  channels: {
    telegram: {
      botToken: "123456:ABC-telegram",
      allowFrom: ["111", 222],
      dmPolicy: "allowlist",
      groupPolicy: "mention",
    },
    discord: { token: "discord-secret", dmPolicy: "pairing" },
    slack: { botToken: "xoxb-slack", appToken: "xapp-slack" },
    signal: { httpHost: "10.0.0.5", httpPort: 9090, account: "+15551234567" },
    matrix: {
      homeserver: "https://matrix.example.com",
      userId: "@fang:example.com",
      accessToken: "mx-token",
      rooms: ["!room:example.com"],
    },
    googleChat: { serviceAccountFile: "credentials/sa.json" },
    irc: { host: "irc.libera.chat", port: 6697, nick: "fangbot", tls: true, channels: ["#openfang"] },
    feishu: { appId: "cli_123", appSecret: "feishu-secret", domain: "example.feishu.cn" },
    imessage: { enabled: true },
    mattermost: { enabled: false, botToken: "mm-token" },
    rocketchat: { url: "https://chat.example.com" },
  },
  cron: { jobs: [] },
  hooks: {},
  auth: { profiles: { default: { provider: "anthropic" } } },
  skills: { entries: { weather: {}, calendar: {} } },
  session: { scope: "per-sender" },
  memory: { backend: "sqlite" },
}
"""

# Every secret value in OPENCLAW_JSON5 that must never reach a plaintext file
JSON5_SECRET_VALUES = [
    "sk-ant-test-123",
    "123456:ABC-telegram",
    "discord-secret",
    "xoxb-slack",
    "xapp-slack",
    "mx-token",
    "feishu-secret",
]


def _write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


# ============ Environment Fixtures ============

@pytest.fixture(autouse=True)
def clear_registered_secrets():
    """Secret values registered for log redaction are process-wide."""
    yield
    from common.logging_config import clear_secrets
    clear_secrets()


@pytest.fixture
def temp_home(tmp_path: Path) -> Generator[Path, None, None]:
    """Provide a temporary home directory with no OpenClaw state."""
    home = tmp_path / "home"
    home.mkdir()

    saved = {k: os.environ.get(k) for k in ("HOME", "OPENCLAW_STATE_DIR", "APPDATA", "LOCALAPPDATA")}
    os.environ["HOME"] = str(home)
    for key in ("OPENCLAW_STATE_DIR", "APPDATA", "LOCALAPPDATA"):
        os.environ.pop(key, None)

    yield home

    for key, value in saved.items():
        if value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = value


@pytest.fixture
def target_dir(tmp_path: Path) -> Path:
    """Destination directory (not created)."""
    return tmp_path / "openfang"


# ============ Source Installation Fixtures ============

@pytest.fixture
def json5_home(tmp_path: Path) -> Path:
    """A modern OpenClaw installation with openclaw.json and side files."""
    home = tmp_path / "openclaw"
    _write(home / "openclaw.json", OPENCLAW_JSON5)

    _write(home / "credentials/sa.json", '{"type": "service_account"}')

    _write(home / "memory/coder/MEMORY.md", "# Coder notes\n\nPrefers pytest.\n")
    _write(home / "agents/helper/MEMORY.md", "Helper remembers things.\n")
    _write(home / "agents/coder/MEMORY.md", "older coder notes\n")
    _write(home / "memory/blank/MEMORY.md", "   \n")

    _write(home / "sessions/a.jsonl", '{"role": "user", "content": "hi"}\n')
    _write(home / "sessions/b.jsonl", '{"role": "user", "content": "hello"}\n')

    _write(home / "workspaces/coder/main.py", "print('hi')\n")
    _write(home / "agents/researcher/workspace/notes.md", "sources\n")
    (home / "workspaces/empty").mkdir(parents=True)

    _write(home / "auth-profiles.json", '{"default": {"apiKey": "sk-should-not-copy"}}')
    (home / "memory-search").mkdir()
    (home / "memory-search/index.db").write_bytes(b"SQLite format 3\x00")

    return home


@pytest.fixture
def legacy_home(tmp_path: Path) -> Path:
    """A legacy multi-file YAML installation."""
    home = tmp_path / "legacy"

    _write(home / "config.yaml", (
        "provider: claude\n"
        "model: claude-3-5-sonnet\n"
        "api_key_env: MY_ANTHROPIC_KEY\n"
        "memory:\n"
        "  decay_rate: 0.1\n"
    ))

    _write(home / "agents/assistant/agent.yaml", (
        "name: Assistant\n"
        "description: General helper\n"
        "tools:\n"
        "  - read_file\n"
        "  - web_search\n"
        "  - unknown_tool\n"
        "tags: [general, chat]\n"
    ))
    _write(home / "agents/ops/agent.yaml", (
        "name: Ops\n"
        "provider: ollama\n"
        "model: llama3\n"
        "tool_profile: automation\n"
        "system_prompt: Keep the servers up.\n"
    ))
    _write(home / "agents/broken/agent.yaml", "name: [unclosed\n")
    _write(home / "agents/assistant/MEMORY.md", "Assistant memory.\n")
    _write(home / "agents/assistant/sessions/s1.jsonl", '{"role": "user"}\n')

    _write(home / "messaging/telegram.yaml", (
        "bot_token_env: TG_TOKEN\n"
        "allowed_users: [42]\n"
        "default_agent: assistant\n"
    ))
    _write(home / "messaging/slack.yaml", "default_agent: ops\n")
    _write(home / "messaging/msteams.yaml", "{}\n")
    _write(home / "messaging/imessage.yaml", "{}\n")
    _write(home / "messaging/rocketchat.yaml", "{}\n")
    _write(home / "messaging/discord.yaml", "bot_token_env: [oops\n")

    _write(home / "skills/community/weather/package.json", "{}")
    _write(home / "skills/community/weather/index.js", "module.exports = {}")
    _write(home / "skills/custom/odd/README.md", "not a skill")

    return home


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line(
        "markers", "unit: fast unit tests with no external deps"
    )
    config.addinivalue_line(
        "markers", "integration: end-to-end migration runs on sample installations"
    )
