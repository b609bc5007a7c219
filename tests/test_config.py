"""Tests for connection settings."""

import pytest
from bitcoind_client.config import ENV_FILE_VAR, RpcConfig

ENV_VARS = [
    "BITCOIND_HOST",
    "BITCOIND_PORT",
    "BITCOIND_USER",
    "BITCOIND_PASSWORD",
    "BITCOIND_WALLET",
    "BITCOIND_USE_HTTPS",
    "BITCOIND_TIMEOUT",
    ENV_FILE_VAR,
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Empty BITCOIND_* environment in an empty working directory.

    Each variable is registered with monkeypatch first so values that
    ``load_dotenv`` sets during a test are removed afterwards.
    """
    for name in ENV_VARS:
        monkeypatch.setenv(name, "x")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestRpcConfig:
    def test_defaults(self):
        config = RpcConfig()
        assert config.url == "http://localhost:18332/"
        assert config.timeout == 30.0

    def test_https_and_wallet(self):
        config = RpcConfig(host="node", port=8332, use_https=True, wallet="a/b")
        assert config.url == "https://node:8332/wallet/a%2Fb"

    def test_password_hidden_from_repr(self):
        assert "hunter2" not in repr(RpcConfig(user="rpc", password="hunter2"))

    @pytest.mark.parametrize("kwargs", [{"host": ""}, {"port": 0}, {"port": 70000}, {"timeout": 0}])
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            RpcConfig(**kwargs)

    def test_with_overrides_skips_none(self):
        config = RpcConfig(host="a", user="u").with_overrides(host="b", user=None)
        assert (config.host, config.user) == ("b", "u")


class TestFromEnv:
    def test_empty_environment(self, clean_env):
        assert RpcConfig.from_env() == RpcConfig()

    def test_variables(self, clean_env, monkeypatch):
        monkeypatch.setenv("BITCOIND_HOST", "10.0.0.2")
        monkeypatch.setenv("BITCOIND_PORT", "8332")
        monkeypatch.setenv("BITCOIND_USER", "rpc")
        monkeypatch.setenv("BITCOIND_PASSWORD", "secret")
        monkeypatch.setenv("BITCOIND_USE_HTTPS", "yes")
        monkeypatch.setenv("BITCOIND_TIMEOUT", "2.5")
        config = RpcConfig.from_env()
        assert config == RpcConfig(
            host="10.0.0.2", port=8332, user="rpc", password="secret", use_https=True, timeout=2.5
        )

    def test_dotenv_in_working_directory(self, clean_env):
        (clean_env / ".env").write_text("BITCOIND_HOST=from-dotenv\nBITCOIND_PORT=18444\n")
        config = RpcConfig.from_env()
        assert (config.host, config.port) == ("from-dotenv", 18444)

    def test_process_environment_beats_dotenv(self, clean_env, monkeypatch):
        (clean_env / ".env").write_text("BITCOIND_HOST=from-dotenv\n")
        monkeypatch.setenv("BITCOIND_HOST", "from-env")
        assert RpcConfig.from_env().host == "from-env"

    def test_chained_and_explicit_files_win(self, clean_env, monkeypatch):
        (clean_env / ".env").write_text("BITCOIND_HOST=cwd\nBITCOIND_USER=cwd\n")
        chained = clean_env / "chained.env"
        chained.write_text("BITCOIND_HOST=chained\nBITCOIND_WALLET=w1\n")
        explicit = clean_env / "explicit.env"
        explicit.write_text("BITCOIND_HOST=explicit\n")
        monkeypatch.setenv(ENV_FILE_VAR, str(chained))

        config = RpcConfig.from_env(explicit)
        assert config.host == "explicit"
        assert config.wallet == "w1"
        assert config.user == "cwd"

    def test_missing_explicit_file(self, clean_env):
        with pytest.raises(ValueError, match="not found"):
            RpcConfig.from_env(clean_env / "nope.env")

    @pytest.mark.parametrize(
        "name, value",
        [("BITCOIND_PORT", "eighty"), ("BITCOIND_TIMEOUT", "soon"), ("BITCOIND_USE_HTTPS", "maybe")],
    )
    def test_malformed_values(self, clean_env, monkeypatch, name, value):
        monkeypatch.setenv(name, value)
        with pytest.raises(ValueError, match=name):
            RpcConfig.from_env()
