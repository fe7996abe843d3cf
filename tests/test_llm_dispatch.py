"""Tests for resolving provider, credentials and model before a request."""

import pytest
from ask.config import Config
from ask.errors import BackendError, MissingCredentialError, UnknownProviderError
from ask.llm import list_remote_models, resolve_api_key, run_api
from ask.llm.base import Provider
from ask.llm.models import FeatureFlags, ProviderInfo, RemoteModel
from ask.llm.registry import ProviderRegistry


class FakeProvider(Provider):
    def __init__(self, info, chunks=(), fail=False):
        super().__init__(info)
        self.chunks = list(chunks)
        self.fail = fail
        self.calls = []

    def stream(self, prompt, model_id, api_key, base_url, features, closer=None):
        self.calls.append((prompt, model_id, api_key, base_url, features))
        yield from self.chunks
        if self.fail:
            raise ConnectionError("boom")

    def list_models(self, api_key, base_url):
        return [RemoteModel(id="fake-1"), RemoteModel(id="fake-2", name="Fake 2")]


FAKE = ProviderInfo(
    name="fake",
    env_key="FAKE_API_KEY",
    default_model="small",
    aliases={"small": "fake-small-001", "big": "fake-big-002"},
    supports_thinking=True,
)
LOCAL = ProviderInfo(name="local", env_key="", default_model="m", aliases={"m": "m"})


@pytest.fixture
def fake():
    return FakeProvider(FAKE, chunks=["Hel", "lo"])


@pytest.fixture
def registry(fake):
    return ProviderRegistry([fake, FakeProvider(LOCAL, chunks=["ok"])])


def test_run_api(fake, registry, monkeypatch):
    monkeypatch.setenv("FAKE_API_KEY", "env-key")
    config = Config(mode="api", provider="fake", base_url="http://proxy")

    received = []
    run_api(
        "hi",
        "big",
        config,
        FeatureFlags(thinking=True, web_search=True),
        registry=registry,
        emit=received.append,
    )

    assert received == ["Hel", "lo"]
    prompt, model_id, api_key, base_url, features = fake.calls[0]
    assert (prompt, model_id, api_key, base_url) == (
        "hi",
        "fake-big-002",
        "env-key",
        "http://proxy",
    )
    # web search isn't supported by this provider
    assert features == FeatureFlags(thinking=True, web_search=False)


def test_run_api_default_model(fake, registry):
    config = Config(mode="api", provider="fake", api_key="cfg-key")

    run_api("hi", None, config, FeatureFlags(), registry=registry, emit=print)

    _, model_id, api_key, base_url, _ = fake.calls[0]
    assert model_id == "fake-small-001"
    assert api_key == "cfg-key"
    assert base_url is None


def test_run_api_full_model_id(fake, registry):
    config = Config(provider="fake", api_key="k")

    run_api("hi", "fake-custom-9", config, FeatureFlags(), registry=registry, emit=print)

    assert fake.calls[0][1] == "fake-custom-9"


def test_unknown_provider(registry):
    config = Config(provider="nope")

    with pytest.raises(UnknownProviderError):
        run_api("hi", None, config, FeatureFlags(), registry=registry)


def test_missing_credential(fake, registry):
    config = Config(provider="fake")

    with pytest.raises(MissingCredentialError) as exc_info:
        run_api("hi", None, config, FeatureFlags(), registry=registry)

    assert "FAKE_API_KEY" in str(exc_info.value)
    assert fake.calls == []


def test_no_credential_needed(registry):
    received = []
    run_api(
        "hi",
        None,
        Config(provider="local"),
        FeatureFlags(),
        registry=registry,
        emit=received.append,
    )
    assert received == ["ok"]


def test_resolve_api_key_precedence(fake, monkeypatch):
    config = Config(api_key="from-config", env={"FAKE_API_KEY": "from-env-table"})
    assert resolve_api_key(fake, config) == "from-env-table"

    monkeypatch.setenv("FAKE_API_KEY", "from-env")
    assert resolve_api_key(fake, config) == "from-env"

    assert resolve_api_key(fake, Config(api_key="from-config")) == "from-env"


def test_credential_not_leaked(monkeypatch):
    provider = FakeProvider(FAKE, fail=True)
    registry = ProviderRegistry([provider])
    config = Config(provider="fake", api_key="sk-secret-value")

    with pytest.raises(BackendError) as exc_info:
        run_api("hi", None, config, FeatureFlags(), registry=registry, emit=print)

    assert exc_info.value.provider == "fake"
    assert "sk-secret-value" not in str(exc_info.value)


def test_dry_run(fake, registry, capsys):
    config = Config(provider="fake", api_key="k")

    run_api(
        "what's up",
        "big",
        config,
        FeatureFlags(thinking=True),
        dry_run=True,
        registry=registry,
    )

    out = capsys.readouterr().out
    assert out.strip() == (
        "[fake] model=fake-big-002 thinking=True search=False prompt=\"what's up\""
    )
    assert fake.calls == []


def test_list_remote_models(registry):
    config = Config(provider="fake", api_key="k")

    models = list_remote_models(config, registry=registry)

    assert [m.id for m in models] == ["fake-1", "fake-2"]
