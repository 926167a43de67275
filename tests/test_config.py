"""Tests for configuration settings and loading."""

import json

import pytest
from pydantic import ValidationError

from palworld_companion.config import CompanionSettings, ConfigurationError, load_config
from palworld_companion.restart import DEFAULT_WARNING_SCHEDULE

REQUIRED = {
    "serverHost": "127.0.0.1",
    "rconPort": 25575,
    "rconPassword": "secret",
    "restartCommand": "systemctl restart palworld",
}


def write_config(path, data) -> None:
    path.write_text(json.dumps(data), encoding="utf-8")


class TestCompanionSettings:
    """Tests for the settings model."""

    def test_defaults(self) -> None:
        settings = CompanionSettings(**REQUIRED)

        assert settings.check_interval_minutes == 5.0
        assert settings.max_memory_percentage == 50.0
        assert settings.process_name == "PalServer-Linux-Test"
        assert settings.log_level == "INFO"
        assert settings.log_format == "text"
        assert tuple(settings.warning_schedule) == DEFAULT_WARNING_SCHEDULE

    def test_required_fields(self) -> None:
        settings = CompanionSettings(**REQUIRED)

        assert settings.server_host == "127.0.0.1"
        assert settings.rcon_port == 25575
        assert settings.rcon_password == "secret"
        assert settings.restart_command == "systemctl restart palworld"

    def test_missing_server_host_fails(self) -> None:
        data = {k: v for k, v in REQUIRED.items() if k != "serverHost"}

        with pytest.raises(ValidationError) as exc_info:
            CompanionSettings(**data)

        assert "serverHost" in str(exc_info.value)

    def test_snake_case_names_accepted(self) -> None:
        settings = CompanionSettings(
            server_host="host",
            rcon_port=1,
            rcon_password="pw",
            restart_command="restart",
        )
        assert settings.server_host == "host"

    def test_settings_are_frozen(self) -> None:
        settings = CompanionSettings(**REQUIRED)

        with pytest.raises(ValidationError):
            settings.max_memory_percentage = 90.0

    def test_restart_args_split_on_whitespace(self) -> None:
        settings = CompanionSettings(**{**REQUIRED, "restartCommand": "  /opt/restart.sh\tpalworld   now "})
        assert settings.get_restart_args() == ["/opt/restart.sh", "palworld", "now"]

    def test_blank_restart_command_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CompanionSettings(**{**REQUIRED, "restartCommand": "   "})

    def test_blank_host_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CompanionSettings(**{**REQUIRED, "serverHost": "  "})

    @pytest.mark.parametrize("port", [0, 65536])
    def test_port_range(self, port) -> None:
        with pytest.raises(ValidationError):
            CompanionSettings(**{**REQUIRED, "rconPort": port})

    @pytest.mark.parametrize("percentage", [-1, 100.5])
    def test_memory_percentage_range(self, percentage) -> None:
        with pytest.raises(ValidationError):
            CompanionSettings(**{**REQUIRED, "maxMemoryPercentage": percentage})

    def test_check_interval_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            CompanionSettings(**{**REQUIRED, "checkIntervalMinutes": 0})

    def test_check_interval_seconds(self) -> None:
        settings = CompanionSettings(**{**REQUIRED, "checkIntervalMinutes": 2.5})
        assert settings.check_interval_seconds == 150.0

    def test_log_level_normalized(self) -> None:
        settings = CompanionSettings(**{**REQUIRED, "logLevel": "warn"})
        assert settings.log_level == "WARNING"

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ValidationError, match="Invalid log level"):
            CompanionSettings(**{**REQUIRED, "logLevel": "LOUD"})

    def test_custom_warning_schedule(self) -> None:
        settings = CompanionSettings(
            **REQUIRED,
            warningSchedule=[
                {"duration": 2, "unit": "minutes"},
                {"duration": 30, "unit": "seconds"},
            ],
        )
        assert [(c.duration, c.unit) for c in settings.warning_schedule] == [
            (2, "minutes"),
            (30, "seconds"),
        ]

    def test_increasing_warning_schedule_rejected(self) -> None:
        with pytest.raises(ValidationError, match="strictly decreasing"):
            CompanionSettings(
                **REQUIRED,
                warningSchedule=[
                    {"duration": 30, "unit": "seconds"},
                    {"duration": 1, "unit": "minutes"},
                ],
            )

    def test_empty_warning_schedule_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CompanionSettings(**REQUIRED, warningSchedule=[])


class TestLoadConfig:
    """Tests for load_config()."""

    def test_loads_config_json_from_working_directory(self, tmp_path) -> None:
        write_config(tmp_path / "config.json", {**REQUIRED, "maxMemoryPercentage": 70})

        settings = load_config()

        assert settings.server_host == "127.0.0.1"
        assert settings.max_memory_percentage == 70.0
        assert settings.check_interval_minutes == 5.0

    def test_config_path_env_var(self, tmp_path, monkeypatch) -> None:
        path = tmp_path / "elsewhere.json"
        write_config(path, {**REQUIRED, "checkIntervalMinutes": 0.5})
        monkeypatch.setenv("CONFIG_PATH", str(path))

        assert load_config().check_interval_minutes == 0.5

    def test_explicit_path(self, tmp_path, monkeypatch) -> None:
        # load_config(path) exports CONFIG_PATH; register it so it is restored
        monkeypatch.setenv("CONFIG_PATH", "unused.json")
        path = tmp_path / "explicit.json"
        write_config(path, REQUIRED)

        assert load_config(str(path)).rcon_port == 25575

    def test_missing_file(self) -> None:
        with pytest.raises(ConfigurationError, match="not found"):
            load_config()

    def test_malformed_json(self, tmp_path) -> None:
        (tmp_path / "config.json").write_text("{not json", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="Invalid JSON"):
            load_config()

    def test_json_array_rejected(self, tmp_path) -> None:
        write_config(tmp_path / "config.json", [REQUIRED])

        with pytest.raises(ConfigurationError, match="JSON object"):
            load_config()

    def test_missing_required_field(self, tmp_path) -> None:
        data = {k: v for k, v in REQUIRED.items() if k != "serverHost"}
        write_config(tmp_path / "config.json", data)

        with pytest.raises(ConfigurationError) as exc_info:
            load_config()

        assert "'serverHost' is required" in str(exc_info.value)

    def test_invalid_value_reported(self, tmp_path) -> None:
        write_config(tmp_path / "config.json", {**REQUIRED, "rconPort": "not-a-port"})

        with pytest.raises(ConfigurationError, match="rconPort"):
            load_config()

    def test_unknown_keys_ignored(self, tmp_path) -> None:
        write_config(tmp_path / "config.json", {**REQUIRED, "discordWebhook": "x"})

        assert load_config().server_host == "127.0.0.1"
