"""Unit tests for publishing values through envman."""

import json

import pytest

from aab2apk.core.exceptions import CommandError
from aab2apk.tools.envman import export_env


def recorded_calls(envman_calls) -> list[dict]:
    return [json.loads(line) for line in envman_calls.read_text().splitlines()]


class TestExportEnv:
    """Tests for `envman add --key <key>`."""

    def test_passes_key_as_arguments_and_value_on_stdin(self, fake_envman, envman_calls):
        """Test that the key is an argument and the value is piped on stdin."""
        export_env("APKS_PATH", "/deploy/app-release-universal.apk", envman=str(fake_envman))

        calls = recorded_calls(envman_calls)
        assert len(calls) == 1
        assert calls[0]["argv"] == ["add", "--key", "APKS_PATH"]
        assert calls[0]["stdin"] == "/deploy/app-release-universal.apk"

    def test_value_with_spaces_is_not_split(self, fake_envman, envman_calls):
        """Test that the value is passed verbatim."""
        export_env("APKS_PATH", "/my deploy/app universal.apk", envman=str(fake_envman))

        call = recorded_calls(envman_calls)[0]
        assert call["argv"] == ["add", "--key", "APKS_PATH"]
        assert call["stdin"] == "/my deploy/app universal.apk"

    def test_failure_raises_command_error(self, failing_envman, envman_calls):
        """Test that a non-zero envman exit surfaces as CommandError."""
        with pytest.raises(CommandError) as exc_info:
            export_env("APKS_PATH", "/deploy/app-universal.apk", envman=str(failing_envman))

        assert exc_info.value.exit_code == 1
        assert str(exc_info.value).endswith("failed (status: 1): envman: failed to add env")
        assert recorded_calls(envman_calls)[0]["argv"] == ["add", "--key", "APKS_PATH"]

    def test_missing_envman(self, temp_dir):
        """Test that an envman that cannot be started raises CommandError."""
        with pytest.raises(CommandError) as exc_info:
            export_env("APKS_PATH", "/deploy/app-universal.apk", envman=str(temp_dir / "no-envman"))

        assert exc_info.value.exit_code is None
