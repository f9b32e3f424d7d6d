from __future__ import annotations

import os
from datetime import date
from pathlib import Path

import pytest

from modjo_sync import main as main_module
from modjo_sync.main import get_config, parse_since, parse_timeout, validate_config

FULL_ENV = {
    "MODJO_API_KEY": "m",
    "DUST_API_KEY": "d",
    "DUST_WORKSPACE_ID": "w",
    "DUST_DATASOURCE_ID": "s",
}


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Empty working directory and no sync variables; anything set later is undone."""
    monkeypatch.chdir(tmp_path)
    for name in [*FULL_ENV, "MODJO_TRANSCRIPTS_SINCE", "REQUEST_TIMEOUT"]:
        monkeypatch.setenv(name, "placeholder")
        monkeypatch.delenv(name)
    return tmp_path


class _FakePipeline:
    succeeded = True
    seen: dict = {}

    def __init__(self, modjo_client, publisher, since=None):
        _FakePipeline.seen = {
            "since": since,
            "modjo_key": modjo_client._session.headers["X-API-KEY"],
            "timeout": modjo_client.timeout,
        }

    def run(self):
        return {}


def test_get_config_defaults() -> None:
    config = get_config(FULL_ENV)

    assert config["modjo_base_url"] is None
    assert config["dust_api_url"] is None
    assert config["transcripts_since"] == "2024-01-01"
    assert parse_timeout(config["request_timeout"]) == 30.0
    assert validate_config(config)


def test_empty_since_means_all_calls() -> None:
    config = get_config({**FULL_ENV, "MODJO_TRANSCRIPTS_SINCE": ""})
    assert parse_since(config["transcripts_since"]) is None
    assert parse_since("2024-06-01") == date(2024, 6, 1)


@pytest.mark.parametrize("missing", sorted(FULL_ENV))
def test_validate_config_rejects_missing_required(missing: str, caplog: pytest.LogCaptureFixture) -> None:
    env = {k: v for k, v in FULL_ENV.items() if k != missing}

    assert not validate_config(get_config(env))
    assert f"{missing} environment variable is required" in caplog.text


def test_validate_config_rejects_bad_date() -> None:
    assert not validate_config(get_config({**FULL_ENV, "MODJO_TRANSCRIPTS_SINCE": "01/02/2024"}))


@pytest.mark.parametrize("value", ["soon", "0", "-5"])
def test_validate_config_rejects_bad_timeout(value: str, caplog: pytest.LogCaptureFixture) -> None:
    assert not validate_config(get_config({**FULL_ENV, "REQUEST_TIMEOUT": value}))
    assert "Invalid REQUEST_TIMEOUT" in caplog.text


def test_main_bad_timeout_is_a_config_error(clean_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    for name, value in FULL_ENV.items():
        monkeypatch.setenv(name, value)
    monkeypatch.setenv("REQUEST_TIMEOUT", "soon")

    assert main_module.main([]) == 1


def test_main_exits_before_any_request_when_misconfigured(clean_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def fail(*args, **kwargs):
        raise AssertionError("client must not be built")

    monkeypatch.setattr(main_module, "ModjoClient", fail)

    assert main_module.main([]) == 1


def test_main_runs_pipeline(clean_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    for name, value in FULL_ENV.items():
        monkeypatch.setenv(name, value)
    monkeypatch.setattr(main_module, "SyncPipeline", _FakePipeline)

    assert main_module.main(["--since", "2024-02-03"]) == 0
    assert _FakePipeline.seen["since"] == date(2024, 2, 3)

    assert main_module.main(["--all"]) == 0
    assert _FakePipeline.seen["since"] is None


def test_main_reads_dotenv_file(clean_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (clean_env / ".env").write_text(
        "MODJO_API_KEY=from-dotenv\n"
        "DUST_API_KEY=d\n"
        "DUST_WORKSPACE_ID=w\n"
        "DUST_DATASOURCE_ID=s\n"
        "REQUEST_TIMEOUT=12\n"
    )
    monkeypatch.setattr(main_module, "SyncPipeline", _FakePipeline)

    assert main_module.main([]) == 0
    assert _FakePipeline.seen["modjo_key"] == "from-dotenv"
    assert _FakePipeline.seen["timeout"] == 12.0
    assert _FakePipeline.seen["since"] == date(2024, 1, 1)


def test_environment_takes_precedence_over_dotenv(clean_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (clean_env / ".env").write_text("MODJO_API_KEY=from-dotenv\n")
    for name, value in FULL_ENV.items():
        monkeypatch.setenv(name, value)
    monkeypatch.setattr(main_module, "SyncPipeline", _FakePipeline)

    assert main_module.main([]) == 0
    assert _FakePipeline.seen["modjo_key"] == "m"
    assert os.environ["MODJO_API_KEY"] == "m"
