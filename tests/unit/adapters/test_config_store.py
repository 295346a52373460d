"""
Tests for the ConfigurationStore adapter.
"""
import json

import pytest
from pydantic import ValidationError

from aia_orchestrator.adapters.config_store import ConfigurationStore
from aia_orchestrator.domains.providers import ProviderKind


@pytest.fixture
def provider_dicts():
    return [
        {"id": "gpt", "name": "GPT", "kind": "OpenAI", "api_key": "sk", "model_id": "gpt-4o", "is_default": True},
        {"id": "claude", "name": "Claude", "kind": "Anthropic", "api_key": "sk", "model_id": "claude-3-5-sonnet"},
    ]


def test_from_dict(provider_dicts):
    store = ConfigurationStore.from_dict(
        {"providers": provider_dicts, "settings": {"max_tool_rounds": 3}}
    )
    providers = store.get_providers()
    assert isinstance(providers, tuple)
    assert [p.kind for p in providers] == [ProviderKind.OPENAI, ProviderKind.ANTHROPIC]
    assert store.get_settings().max_tool_rounds == 3


def test_empty_config():
    store = ConfigurationStore.from_dict({})
    assert store.get_providers() == ()
    assert store.get_settings().enable_auto_routing


def test_rejects_two_defaults(provider_dicts):
    provider_dicts[1]["is_default"] = True
    with pytest.raises(ValueError):
        ConfigurationStore(providers=provider_dicts)


def test_rejects_duplicate_ids(provider_dicts):
    provider_dicts[1]["id"] = "gpt"
    with pytest.raises(ValueError, match="unique"):
        ConfigurationStore(providers=provider_dicts)


def test_invalid_settings_raise_value_error():
    with pytest.raises(ValueError):
        ConfigurationStore(settings={"max_tool_rounds": 0})
    assert issubclass(ValidationError, ValueError)


def test_from_directory(tmp_path, provider_dicts):
    (tmp_path / "providers.json").write_text(json.dumps(provider_dicts))
    (tmp_path / "settings.json").write_text(json.dumps({"enable_auto_routing": False}))

    store = ConfigurationStore.from_directory(tmp_path)

    assert len(store.get_providers()) == 2
    assert store.get_settings().enable_auto_routing is False


def test_from_directory_missing_files(tmp_path):
    store = ConfigurationStore.from_directory(tmp_path)
    assert store.get_providers() == ()
    assert store.get_settings().max_tool_rounds == 5


def test_from_directory_invalid_json(tmp_path):
    (tmp_path / "providers.json").write_text("{not json")
    with pytest.raises(ValueError, match="Invalid JSON"):
        ConfigurationStore.from_directory(tmp_path)


def test_set_default_provider_replaces_snapshot(provider_dicts):
    store = ConfigurationStore(providers=provider_dicts)
    before = store.get_providers()

    store.set_default_provider("claude")

    after = store.get_providers()
    assert [p.is_default for p in after] == [False, True]
    # Earlier snapshots are untouched
    assert [p.is_default for p in before] == [True, False]
    with pytest.raises(KeyError):
        store.set_default_provider("missing")


def test_update_settings_validates(provider_dicts):
    store = ConfigurationStore(providers=provider_dicts)
    before = store.get_settings()

    updated = store.update_settings(enable_tool_use=False)

    assert updated is store.get_settings()
    assert updated.enable_tool_use is False
    assert before.enable_tool_use is True
    with pytest.raises(ValueError):
        store.update_settings(request_timeout=-1)
    assert store.get_settings() is updated


def test_replace_providers(provider_dicts):
    store = ConfigurationStore(providers=provider_dicts)
    store.replace_providers(provider_dicts[:1])
    assert [p.id for p in store.get_providers()] == ["gpt"]
