"""Tests for the service entry point."""

import json
from unittest.mock import MagicMock, patch

from palworld_companion.__main__ import EXIT_STARTUP_ERROR, EXIT_SUCCESS, main

CONFIG = {
    "serverHost": "127.0.0.1",
    "rconPort": 25575,
    "rconPassword": "secret",
    "restartCommand": "systemctl restart palworld",
}


class TestMain:
    """Tests for main()."""

    @patch("palworld_companion.config.load_config")
    @patch("palworld_companion.system.is_root_user", return_value=False)
    def test_requires_root(self, mock_root, mock_load) -> None:
        assert main() == EXIT_STARTUP_ERROR
        mock_load.assert_not_called()

    @patch("palworld_companion.system.is_root_user", return_value=True)
    def test_missing_config_exits_with_error(self, mock_root) -> None:
        assert main() == EXIT_STARTUP_ERROR

    @patch("palworld_companion.system.is_root_user", return_value=True)
    def test_invalid_config_exits_with_error(self, mock_root, tmp_path) -> None:
        (tmp_path / "config.json").write_text(json.dumps({"rconPort": 25575}))

        assert main() == EXIT_STARTUP_ERROR

    @patch("palworld_companion.monitor.MonitorLoop")
    @patch("palworld_companion.system.is_root_user", return_value=True)
    def test_runs_monitor_until_interrupted(self, mock_root, mock_loop_class, tmp_path) -> None:
        (tmp_path / "config.json").write_text(json.dumps(CONFIG))
        mock_loop = MagicMock()
        mock_loop.run.side_effect = KeyboardInterrupt
        mock_loop_class.return_value = mock_loop

        assert main() == EXIT_SUCCESS

        mock_loop.run.assert_called_once()
        settings, client = mock_loop_class.call_args[0]
        assert settings.server_host == "127.0.0.1"
        assert client.host == "127.0.0.1"
        assert client.port == 25575
