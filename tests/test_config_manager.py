from __future__ import annotations

from pathlib import Path

import pytest

from newsdesk.config_manager import (
    ConfigError,
    check_consistency,
    env_var_to_key,
    load_config,
    main,
    show_value,
    source_of,
)


def test_defaults_match_runtime_constants(tmp_path: Path) -> None:
    config = load_config(tmp_path / "config.toml", environ={})

    assert config.collection.request_timeout_seconds == 15
    assert config.translation.enabled_locales == ["en", "ar"]
    assert config.translation.batch_size == 20
    assert config.translation.batch_delay_seconds == 2
    assert config.translation.cycle_interval_seconds == 30
    assert config.metrics.history_limit == 500
    assert config.metrics.recent_limit == 50
    assert config.text_processing.max_length == 1000
    assert config.scheduler.skip_if_in_flight is False
    assert source_of(config, "translation.batch_size") == "default"


def test_precedence_env_overrides(tmp_path: Path) -> None:
    config_file = tmp_path / "config.toml"
    config_file.write_text("[translation]\nbatch_size = 10\n", encoding="utf-8")
    env_file = tmp_path / ".env"
    env_file.write_text("NEWSDESK__TRANSLATION__BATCH_SIZE=12\n", encoding="utf-8")
    environ = {"NEWSDESK__TRANSLATION__BATCH_SIZE": "15"}

    config = load_config(config_file, environ=environ)

    assert config.translation.batch_size == 15
    assert source_of(config, "translation.batch_size") == (
        "env (NEWSDESK__TRANSLATION__BATCH_SIZE, process)"
    )


def test_env_file_overrides_config_file(tmp_path: Path) -> None:
    config_file = tmp_path / "config.toml"
    config_file.write_text("[scheduler]\nskip_if_in_flight = false\n", encoding="utf-8")
    (tmp_path / ".env").write_text(
        "NEWSDESK__SCHEDULER__SKIP_IF_IN_FLIGHT=true\nLINGODOTDEV_API_KEY=ignored\n",
        encoding="utf-8",
    )

    config = load_config(config_file, environ={})

    assert config.scheduler.skip_if_in_flight is True
    assert source_of(config, "scheduler.skip_if_in_flight").startswith("env-file")
    assert config.translation.api_key is None


def test_config_file_layer_is_recorded(tmp_path: Path) -> None:
    config_file = tmp_path / "config.toml"
    config_file.write_text("[metrics]\nrecent_limit = 25\n", encoding="utf-8")

    config = load_config(config_file, environ={})

    assert config.metrics.recent_limit == 25
    assert source_of(config, "metrics.recent_limit") == f"file ({config_file})"


@pytest.mark.parametrize(
    "raw",
    ['["en", "ar", "fr", "en"]', "en, ar,fr,en"],
)
def test_locale_lists_parse_from_environment(tmp_path: Path, raw: str) -> None:
    config = load_config(
        tmp_path / "config.toml",
        environ={"NEWSDESK__TRANSLATION__ENABLED_LOCALES": raw},
    )

    assert config.translation.enabled_locales == ["en", "ar", "fr"]


def test_env_var_mapping() -> None:
    assert env_var_to_key("NEWSDESK__TRANSLATION__BATCH_SIZE") == "translation.batch_size"
    assert env_var_to_key("HOME") is None
    with pytest.raises(ConfigError):
        env_var_to_key("NEWSDESK__FEEDS__URL")
    with pytest.raises(ConfigError):
        env_var_to_key("NEWSDESK__TRANSLATION")


def test_unknown_section_in_environment_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ConfigError) as excinfo:
        load_config(tmp_path / "config.toml", environ={"NEWSDESK__PATHS__DATA_DIR": "x"})
    assert "NEWSDESK__PATHS__DATA_DIR" in str(excinfo.value)


def test_blank_api_key_normalized(tmp_path: Path) -> None:
    config_file = tmp_path / "config.toml"
    config_file.write_text('[translation]\napi_key = "  "\n', encoding="utf-8")

    assert load_config(config_file, environ={}).translation.api_key is None


def test_validation_errors_report_source(tmp_path: Path) -> None:
    config_file = tmp_path / "config.toml"
    config_file.write_text(
        "[collection]\nrequest_timeout_seconds = 'abc'\n", encoding="utf-8"
    )
    with pytest.raises(ConfigError) as excinfo:
        load_config(config_file, environ={})
    message = str(excinfo.value)
    assert "collection.request_timeout_seconds" in message
    assert f"file ({config_file})" in message


def test_validation_errors_never_echo_the_credential(tmp_path: Path) -> None:
    config_file = tmp_path / "config.toml"
    config_file.write_text("[translation]\napi_key = 12345\n", encoding="utf-8")

    with pytest.raises(ConfigError) as excinfo:
        load_config(config_file, environ={})
    assert "translation.api_key" in str(excinfo.value)
    assert "12345" not in str(excinfo.value)


def test_recent_limit_cannot_exceed_history(tmp_path: Path) -> None:
    config_file = tmp_path / "config.toml"
    config_file.write_text(
        "[metrics]\nhistory_limit = 10\nrecent_limit = 20\n", encoding="utf-8"
    )
    with pytest.raises(ConfigError):
        load_config(config_file, environ={})


@pytest.mark.parametrize(
    "content",
    [
        "[translation]\nbatchsize = 5\n",
        "[paths]\ndata_dir = 'data'\n",
        "batch_size = 5\n",
    ],
)
def test_unknown_keys_are_rejected(tmp_path: Path, content: str) -> None:
    config_file = tmp_path / "config.toml"
    config_file.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(config_file, environ={})


def test_consistency_rules(tmp_path: Path) -> None:
    config = load_config(
        tmp_path / "config.toml",
        environ={"NEWSDESK__TRANSLATION__BATCH_DELAY_SECONDS": "45"},
    )
    with pytest.raises(ConfigError, match="batch_delay_seconds"):
        check_consistency(config)

    config = load_config(
        tmp_path / "config.toml",
        environ={"NEWSDESK__TRANSLATION__API_URL": "ftp://engine"},
    )
    with pytest.raises(ConfigError, match="api_url"):
        check_consistency(config)


def test_show_value_masks_credential(tmp_path: Path) -> None:
    config = load_config(
        tmp_path / "config.toml",
        environ={"NEWSDESK__TRANSLATION__API_KEY": "super-secret"},
    )

    rendered = show_value(config, "translation.api_key")

    assert "super-secret" not in rendered
    assert "***" in rendered
    assert "NEWSDESK__TRANSLATION__API_KEY" in rendered
    with pytest.raises(ConfigError):
        show_value(config, "translation.missing")


def test_cli_show_reports_value_and_source(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    config_file = tmp_path / "config.toml"
    config_file.write_text("[translation]\nbatch_size = 7\n", encoding="utf-8")
    monkeypatch.delenv("NEWSDESK__TRANSLATION__BATCH_SIZE", raising=False)

    assert main(["--config", str(config_file), "--show", "translation.batch_size"]) == 0

    output = capsys.readouterr().out
    assert "translation.batch_size = 7" in output
    assert str(config_file) in output


def test_cli_validate_summarizes_translation(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.delenv("NEWSDESK__TRANSLATION__API_KEY", raising=False)
    monkeypatch.delenv("NEWSDESK__TRANSLATION__ENABLED_LOCALES", raising=False)

    assert main(["--config", str(tmp_path / "config.toml"), "--validate"]) == 0

    output = capsys.readouterr().out
    assert "Configuration OK" in output
    assert "en, ar" in output


def test_cli_validate_reports_errors(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    config_file = tmp_path / "config.toml"
    config_file.write_text("[translation]\nbatch_size = 0\n", encoding="utf-8")

    assert main(["--config", str(config_file), "--validate"]) == 1
    assert "translation.batch_size" in capsys.readouterr().err
