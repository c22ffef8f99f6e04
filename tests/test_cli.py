"""Tests for the interactive CLI loop."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from fundbot.cli import run_cli


def scripted(*lines):
    it = iter(lines)
    return lambda _prompt: next(it)


@pytest.fixture
def orchestrator():
    orch = MagicMock()
    orch.handle_turn = AsyncMock(return_value="A SIP is a Systematic Investment Plan.")
    return orch


class TestRunCli:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("command", ["exit", "QUIT", "  Exit  "])
    async def test_exit_commands(self, orchestrator, command):
        with pytest.raises(SystemExit) as exc:
            await run_cli(orchestrator, input_fn=scripted(command), output=lambda _s: None)
        assert exc.value.code == 0
        orchestrator.handle_turn.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_blank_input_reprompts(self, orchestrator):
        printed = []
        with pytest.raises(SystemExit):
            await run_cli(orchestrator, input_fn=scripted("   ", "exit"), output=printed.append)
        assert "Please enter a question." in printed
        orchestrator.handle_turn.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_query_is_answered(self, orchestrator):
        printed = []
        with pytest.raises(SystemExit):
            await run_cli(orchestrator, input_fn=scripted("What is SIP?", "quit"), output=printed.append)
        orchestrator.handle_turn.assert_awaited_once_with("What is SIP?")
        assert "\nBot: A SIP is a Systematic Investment Plan." in printed

    @pytest.mark.asyncio
    async def test_turn_error_is_reported_and_loop_continues(self, orchestrator):
        orchestrator.handle_turn.side_effect = [RuntimeError("boom"), "second answer"]
        printed = []
        with pytest.raises(SystemExit):
            await run_cli(orchestrator, input_fn=scripted("first", "second", "exit"), output=printed.append)
        assert "Error: boom" in printed
        assert "\nBot: second answer" in printed

    @pytest.mark.asyncio
    async def test_end_of_input_exits_cleanly(self, orchestrator):
        def eof(_prompt):
            raise EOFError

        with pytest.raises(SystemExit) as exc:
            await run_cli(orchestrator, input_fn=eof, output=lambda _s: None)
        assert exc.value.code == 0
