"""
Tests for command normalization and per-device execution.
"""

from types import SimpleNamespace

import pytest

from adb_multiplexer.core.errors import ExecutionError
from adb_multiplexer.execution import executor as executor_module
from adb_multiplexer.execution.executor import CommandExecutor, normalize_command

from conftest import make_device


class RecordingClient:
    """Records run() calls instead of spawning adb."""

    def __init__(self, output="Success", error=None):
        self.output = output
        self.error = error
        self.calls = []

    def run(self, serial, args, timeout=None):
        self.calls.append((serial, args, timeout))
        if self.error:
            raise self.error
        return self.output


class TestNormalizeCommand:
    """Test the optional "adb" keyword."""

    def test_strips_leading_adb(self):
        assert normalize_command("adb install app.apk") == ["install", "app.apk"]

    def test_prefix_is_optional(self):
        assert normalize_command("install app.apk") == ["install", "app.apk"]

    def test_surrounding_whitespace(self):
        assert normalize_command("  adb   shell ls  ") == ["shell", "ls"]

    def test_only_whole_word_prefix(self):
        assert normalize_command("adbfoo bar") == ["adbfoo", "bar"]

    def test_only_leading_prefix(self):
        assert normalize_command("shell echo adb") == ["shell", "echo", "adb"]

    def test_quoted_arguments(self):
        assert normalize_command('adb install "my app.apk"') == ["install", "my app.apk"]

    def test_custom_prefix(self):
        assert normalize_command("fastboot devices", prefix="fastboot") == ["devices"]

    @pytest.mark.parametrize("command", ["", "   ", "adb", " adb "])
    def test_empty_command(self, command):
        with pytest.raises(ExecutionError):
            normalize_command(command)

    def test_unbalanced_quotes(self):
        with pytest.raises(ExecutionError):
            normalize_command('install "app.apk')

    def test_windows_paths_keep_backslashes(self):
        args = normalize_command(r"adb install C:\apps\my.apk", posix=False)
        assert args == ["install", r"C:\apps\my.apk"]

    def test_windows_quoted_path(self):
        args = normalize_command(r'install "C:\my apps\app.apk"', posix=False)
        assert args == ["install", r"C:\my apps\app.apk"]

    def test_windows_single_quotes(self):
        args = normalize_command("shell 'echo hi'", posix=False)
        assert args == ["shell", "echo hi"]

    def test_windows_unbalanced_quotes(self):
        with pytest.raises(ExecutionError):
            normalize_command('install "C:\\app.apk', posix=False)

    def test_default_follows_platform(self, monkeypatch):
        monkeypatch.setattr(executor_module, "os", SimpleNamespace(name="nt"))
        assert normalize_command(r"install C:\apps\my.apk") == ["install", r"C:\apps\my.apk"]


class TestCommandExecutor:
    """Test execution against a device."""

    def test_scopes_command_to_device(self):
        client = RecordingClient()
        executor = CommandExecutor(client, timeout=30.0)

        output = executor.execute(make_device("emulator-5554"), "adb install app.apk")

        assert output == "Success"
        assert client.calls == [("emulator-5554", ["install", "app.apk"], 30.0)]

    def test_execution_error_passes_through(self):
        error = ExecutionError("Command failed", device_id="A", output="Failure [INSTALL_FAILED]")
        executor = CommandExecutor(RecordingClient(error=error))

        with pytest.raises(ExecutionError) as exc_info:
            executor.execute(make_device("A"), "install app.apk")

        assert exc_info.value.output == "Failure [INSTALL_FAILED]"

    def test_empty_command_names_device(self):
        client = RecordingClient()
        executor = CommandExecutor(client)

        with pytest.raises(ExecutionError) as exc_info:
            executor.execute(make_device("A"), "adb")

        assert exc_info.value.device_id == "A"
        assert client.calls == []
