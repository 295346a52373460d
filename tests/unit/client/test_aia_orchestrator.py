"""
Tests for the AIAOrchestrator client facade.
"""
import json

import pytest
from unittest.mock import patch

from aia_orchestrator.client.aia_orchestrator import AIAOrchestrator
from aia_orchestrator.domains.messages import Response
from aia_orchestrator.domains.routing import RoutingCategory
from aia_orchestrator.exceptions import RoutingError
from aia_orchestrator.plugins.tools.auto_tool import FunctionTool


@pytest.fixture(autouse=True)
def no_entry_points():
    with patch("importlib.metadata.entry_points", return_value=[]):
        yield


@pytest.fixture
def config():
    return {
        "providers": [
            {"id": "coder", "name": "Coder", "kind": "OpenAI", "api_key": "sk",
             "model_id": "gpt-4o", "strengths": ["coding"], "priority": 50},
            {"id": "writer", "name": "Writer", "kind": "OpenAI", "api_key": "sk",
             "model_id": "gpt-4o", "strengths": ["creative"], "priority": 90},
        ],
        "tools": {"builtin": False},
    }


def test_requires_config():
    with pytest.raises(ValueError):
        AIAOrchestrator()


def test_loads_json_file(tmp_path, config):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(config))
    client = AIAOrchestrator(config_path=str(path))
    assert [p.id for p in client.list_providers()] == ["coder", "writer"]


def test_loads_python_file(tmp_path, config):
    path = tmp_path / "config.py"
    path.write_text(f"config = {config!r}\n")
    client = AIAOrchestrator(config_path=str(path))
    assert len(client.list_providers()) == 2


def test_route_preview(config):
    client = AIAOrchestrator(config=config)
    category, provider = client.route("Write a Fibonacci function in Python")
    assert category == RoutingCategory.CODING
    assert provider.id == "coder"


def test_route_without_providers():
    client = AIAOrchestrator(config={"providers": [], "settings": {}})
    with pytest.raises(RoutingError):
        client.route("hello")


def test_register_and_list_tools(config):
    client = AIAOrchestrator(config=config)
    tool = FunctionTool("echo", "Echo text", lambda text: text, parameters={"text": {"required": True}})

    assert client.register_tool(tool)
    assert not client.register_tool(tool)
    assert client.list_tools() == [{"name": "echo", "description": "Echo text"}]


@pytest.mark.asyncio
async def test_process_and_title(config, scripted_client):
    client = AIAOrchestrator(config=config)
    fake = scripted_client([Response(content="def fib(n): ..."), Response(content="Fibonacci Function")])
    client.register_client(fake)
    conversation_id = client.new_conversation()

    response = await client.process(conversation_id, "Write a Fibonacci function in Python")
    await client.wait_for_naming()

    assert response.content == "def fib(n): ..."
    assert response.provider_id == "coder"
    assert client.get_title(conversation_id) == "Fibonacci Function"
    assert client.get_title("unknown") is None


@pytest.mark.asyncio
async def test_stream_yields_text(config, scripted_client):
    client = AIAOrchestrator(config=config)
    client.register_client(scripted_client([Response(content="Hello there")], chunk_size=4))

    chunks = [chunk async for chunk in client.stream(client.new_conversation(), "hi")]
    await client.wait_for_naming()

    assert "".join(chunks) == "Hello there"
