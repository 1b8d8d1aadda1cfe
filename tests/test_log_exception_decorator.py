"""
Tests for the log_exception decorator.

Tests cover:
- Exception logging with sync and async functions
- Parameter binding and prefix substitution
- Binding failures
"""

import asyncio

from proc_exporter.logger import log_exception


class TestBasicExceptionLogging:
    """Test basic exception logging functionality."""

    def test_sync_function_with_prefix(self, caplog):
        """Sync function logs exception with prefix and returns None."""

        @log_exception("Report pass")
        def render():
            raise ValueError("registry unavailable")

        assert render() is None
        assert "Report pass: ValueError: registry unavailable" in caplog.text
        assert "ERROR" in caplog.text

    async def test_async_function_with_prefix(self, caplog):
        """Async function logs exception with prefix and returns None."""

        @log_exception("Update pass")
        async def update_once():
            await asyncio.sleep(0.01)
            raise RuntimeError("psutil failure")

        assert await update_once() is None
        assert "Update pass: RuntimeError: psutil failure" in caplog.text

    async def test_successful_execution_no_log(self, caplog):
        """Successful calls pass the return value through and log nothing."""

        @log_exception("Sampling")
        async def sample(pid: int) -> float:
            return 12.5

        assert await sample(1) == 12.5
        assert "ERROR" not in caplog.text


class TestParameterFormatting:
    """Test bound arguments and prefix substitution."""

    def test_arguments_are_logged_by_name(self, caplog):
        @log_exception()
        def sample(pid: int, interval: float = 0.5):
            raise ValueError("bad read")

        sample(321)

        assert "[pid=321, interval=0.5]" in caplog.text

    def test_self_is_not_logged(self, caplog):
        class Updater:
            @log_exception("Updating {name}")
            def update(self, name: str):
                raise KeyError(name)

        Updater().update("sshd")

        assert "[name='sshd'] Updating sshd: KeyError" in caplog.text
        assert "self=" not in caplog.text

    def test_missing_parameter_in_prefix(self, caplog):
        @log_exception("Process {missing}")
        def resolve(name: str):
            raise ValueError("bad name")

        assert resolve("sshd") is None
        assert "Failed to format prefix" in caplog.text
        assert "Process {missing}: ValueError: bad name" in caplog.text

    def test_binding_failure_falls_back(self, caplog):
        @log_exception("Binding")
        def resolve(name: str):
            raise ValueError("unused")

        assert resolve("sshd", "extra") is None  # type: ignore[call-arg]
        assert "Failed to bind arguments for function" in caplog.text
        assert "args=('sshd', 'extra')" in caplog.text
