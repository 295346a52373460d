"""
Tests for the typer CLI.
"""
import asyncio
import json

import pytest
from typer.testing import CliRunner
from unittest.mock import patch

from aia_orchestrator import cli
from aia_orchestrator.cli import app
from aia_orchestrator.domains.conversation import OrchestrationEvent
from aia_orchestrator.domains.messages import Response

runner = CliRunner()


@pytest.fixture(autouse=True)
def no_entry_points():
    with patch("importlib.metadata.entry_points", return_value=[]):
        yield


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    # Keep table cells on one line
    monkeypatch.setattr(cli.console, "width", 200)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "providers": [
                    {"id": "coder", "name": "Coder", "kind": "OpenAI", "api_key": "sk",
                     "model_id": "gpt-4o", "strengths": ["coding"], "is_default": True},
                    {"id": "azure", "name": "Azure Writer", "kind": "AzureOpenAI", "api_key": "sk",
                     "endpoint": "https://example.openai.azure.com", "deployment_name": "writer",
                     "strengths": ["creative"], "priority": 90},
                ]
            }
        )
    )
    return str(path)


def test_route(config_file):
    result = runner.invoke(app, ["route", "Write a Python function", "--config", config_file])
    assert result.exit_code == 0
    assert "coding" in result.stdout
    assert "Coder" in result.stdout


def test_providers(config_file):
    result = runner.invoke(app, ["providers", "--config", config_file])
    assert result.exit_code == 0
    assert "Azure Writer" in result.stdout
    assert "writer" in result.stdout


def test_tools(config_file):
    result = runner.invoke(app, ["tools", "--config", config_file])
    assert result.exit_code == 0
    assert "get_current_time" in result.stdout


def test_missing_config(tmp_path):
    result = runner.invoke(app, ["providers", "--config", str(tmp_path / "nope.json")])
    assert result.exit_code == 1
    assert "not found" in result.stdout


class RecordingOrchestrator:
    """Stand-in client that records the event loop serving each turn."""

    def __init__(self):
        self.loops = []
        self.messages = []

    def new_conversation(self):
        return "conv-1"

    async def stream_events(self, conversation_id, message):
        self.loops.append(asyncio.get_running_loop())
        self.messages.append(message)
        yield OrchestrationEvent(type="status", status="Thinking...")
        yield OrchestrationEvent(type="content", delta=f"echo {message}")
        yield OrchestrationEvent(
            type="completed",
            response=Response(content=f"echo {message}", prompt_tokens=3, completion_tokens=2),
        )

    async def wait_for_naming(self):
        pass

    def get_title(self, conversation_id):
        return "Echo chat"


def test_chat_turns_share_one_event_loop():
    orchestrator = RecordingOrchestrator()
    with patch.object(cli, "load_orchestrator", return_value=orchestrator):
        result = runner.invoke(app, ["chat"], input="hello\n\nagain\nexit\n")

    assert result.exit_code == 0
    assert orchestrator.messages == ["hello", "again"]
    assert orchestrator.loops[0] is orchestrator.loops[1]
    assert "echo again" in result.stdout
    assert "Conversation: Echo chat" in result.stdout
    assert "Exiting chat session." in result.stdout
