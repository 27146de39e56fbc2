"""Tests for the session: handlers, channel switching, and the run loop."""
import asyncio
from datetime import datetime

import pytest

from slk.events import RemoteEvent, TaskEvent, TerminalEvent
from slk.session import Session, SessionExit, Signal
from slk.session.session import HISTORY_LOADED
from slk.ui.config import UNKNOWN_CHANNEL, UNKNOWN_USER

from conftest import FakeRemoteClient, FakeTerminal, diagnostics, key_events, run_pending, type_line


class TestTyping:
    """Tests for compose-line handling."""

    @pytest.mark.asyncio
    async def test_printable_key_appends(self, session):
        """Test an unmapped printable key is typed."""
        session.handle_event(TerminalEvent("a"))
        assert session.input.text == "a"

    @pytest.mark.asyncio
    async def test_space_and_backspace(self, session):
        for key in ["h", "<Space>", "i", "<Backspace>"]:
            session.handle_event(TerminalEvent(key))
        assert session.input.text == "h "

    @pytest.mark.asyncio
    async def test_empty_enter_does_nothing(self, session, remote):
        """Test Enter on an empty line sends nothing and reports nothing."""
        assert session.handle_event(TerminalEvent("<Enter>")) is None

        await run_pending(session)

        assert len(session.history) == 0
        assert remote.posted == []

    @pytest.mark.asyncio
    async def test_enter_empties_input(self, session):
        type_line(session, "/join #general")
        assert session.input.text == ""


class TestChannelSwitch:
    """Tests for /join and the history fetch it triggers."""

    @pytest.mark.asyncio
    async def test_join_existing_channel(self, session):
        """Test /join makes the channel active and loads its history."""
        type_line(session, "/join #general")

        assert session.active_channel == "C1"

        await run_pending(session)

        assert [m.text for m in session.history.messages] == ["hello general", "morning"]
        assert [m.sender for m in session.history.messages] == ["Alice Liddell", "bob"]
        assert diagnostics(session) == []

    @pytest.mark.asyncio
    async def test_join_missing_channel(self, session):
        """Test an unknown channel yields one diagnostic and no state change."""
        type_line(session, "/join #general")
        await run_pending(session)
        before = session.history.messages

        type_line(session, "/join #missing")
        await run_pending(session)

        assert session.active_channel == "C1"
        assert diagnostics(session) == ["channel not found: #missing"]
        assert session.history.messages[:len(before)] == before
        assert len(session.history) == len(before) + 1

    @pytest.mark.asyncio
    async def test_join_without_argument(self, session):
        type_line(session, "/join")
        await run_pending(session)

        assert session.active_channel is None
        assert diagnostics(session) == ["failed to process command, need 1 argument"]

    @pytest.mark.asyncio
    async def test_history_failure_keeps_state(self, session, remote):
        """Test a failed fetch keeps the old history and the new active channel."""
        type_line(session, "/join #general")
        await run_pending(session)
        loaded = session.history.messages

        remote.failures.add("loading history")
        type_line(session, "/join #random")
        await run_pending(session)

        assert session.active_channel == "C2"
        assert session.history.messages[:len(loaded)] == loaded
        assert diagnostics(session) == ["could not load history: loading history failed: boom"]

    @pytest.mark.asyncio
    async def test_last_completed_fetch_wins(self, session, remote, terminal):
        """Test overlapping switches apply results in completion order."""
        remote.gates = {"C1": asyncio.Event(), "C2": asyncio.Event()}

        type_line(session, "/join #general")
        type_line(session, "/join #random")
        assert session.active_channel == "C2"

        consumer = asyncio.create_task(run_pending(session))
        remote.gates["C2"].set()
        await asyncio.sleep(0.01)
        assert [m.text for m in session.history.messages] == ["random thought"]

        remote.gates["C1"].set()
        await consumer

        assert session.active_channel == "C2"
        assert [m.text for m in session.history.messages] == ["hello general", "morning"]
        assert any(level == "warning" for level, _, _ in terminal.logs)

    @pytest.mark.asyncio
    async def test_history_payload_must_match(self, session):
        """Test a mis-wired task payload is a programmer error."""
        with pytest.raises(TypeError):
            session.handle_event(TaskEvent(HISTORY_LOADED, payload="not a result"))


class TestCommands:
    """Tests for the other slash commands."""

    @pytest.mark.asyncio
    async def test_quit(self, session):
        assert type_line(session, "/quit") is Signal.SHUTDOWN

    @pytest.mark.asyncio
    async def test_part(self, session):
        type_line(session, "/join #general")
        await run_pending(session)

        type_line(session, "/part")

        assert session.active_channel is None
        assert len(session.history) == 0

    @pytest.mark.asyncio
    async def test_clear_keeps_channel(self, session):
        type_line(session, "/join #general")
        await run_pending(session)

        type_line(session, "/clear")

        assert session.active_channel == "C1"
        assert len(session.history) == 0

    @pytest.mark.asyncio
    async def test_refresh_reloads_directory(self, session, remote):
        """Test /refresh replaces the directory with fresh data."""
        remote.channels = remote.channels[:1]

        type_line(session, "/refresh")
        await run_pending(session)

        assert list(session.directory.channels) == ["C1"]
        assert "Loaded 1 channels" in diagnostics(session)
        assert "Loaded 2 users" in diagnostics(session)

    @pytest.mark.asyncio
    async def test_unknown_command(self, session):
        type_line(session, "/frobnicate now")
        await run_pending(session)
        assert diagnostics(session) == ["unprocessed command: /frobnicate now"]


class TestSending:
    """Tests for posting typed lines."""

    @pytest.mark.asyncio
    async def test_send_without_channel(self, session, remote):
        type_line(session, "hello")
        await run_pending(session)

        assert remote.posted == []
        assert diagnostics(session) == ["no active channel, use /join #channel first"]

    @pytest.mark.asyncio
    async def test_send_to_active_channel(self, session, remote):
        type_line(session, "/join #general")
        type_line(session, "hello world")
        await run_pending(session)

        assert remote.posted == [("C1", "hello world")]

    @pytest.mark.asyncio
    async def test_send_failure_is_reported(self, session, remote):
        type_line(session, "/join #general")
        await run_pending(session)
        remote.failures.add("posting message")
        type_line(session, "hello")
        await run_pending(session)

        assert diagnostics(session) == ["could not send message: posting message failed: boom"]


class TestRemoteEvents:
    """Tests for events from the remote connection."""

    def message(self, channel="C1", user="U1", text="hi"):
        return RemoteEvent(
            type="message",
            data={"channel": channel, "user": user, "text": text, "ts": "1.0",
                  "timestamp": datetime(2024, 3, 5, 9, 30)},
        )

    @pytest.mark.asyncio
    async def test_message_in_active_channel(self, session):
        session.active_channel = "C1"

        session.handle_event(self.message())

        [message] = session.history.messages
        assert (message.sender, message.text) == ("Alice Liddell", "hi")

    @pytest.mark.asyncio
    async def test_unknown_sender_placeholder(self, session):
        session.active_channel = "C1"

        session.handle_event(self.message(user="UX"))

        assert session.history.messages[0].sender == UNKNOWN_USER

    @pytest.mark.asyncio
    async def test_message_elsewhere_is_not_shown(self, session, terminal):
        session.active_channel = "C1"

        session.handle_event(self.message(channel="C2"))

        assert len(session.history) == 0
        assert terminal.logs

    @pytest.mark.asyncio
    async def test_connected_sets_self_id(self, session):
        session.handle_event(RemoteEvent(type="connected", data={"self_id": "U1"}))

        assert session.self_id == "U1"
        assert session.view().status == "connected as Alice Liddell"

    @pytest.mark.asyncio
    async def test_ignored_events(self, session):
        session.handle_event(RemoteEvent(type="hello"))
        session.handle_event(RemoteEvent(type="user_typing"))
        await run_pending(session)

        assert len(session.history) == 0

    @pytest.mark.asyncio
    async def test_unhandled_event_diagnostic(self, session):
        session.handle_event(RemoteEvent(type="reaction_added"))
        await run_pending(session)

        assert diagnostics(session) == ["unhandled event remote:reaction_added"]


class TestView:
    """Tests for the frame handed to the terminal."""

    @pytest.mark.asyncio
    async def test_view_reflects_state(self, session):
        type_line(session, "/join #general")
        session.handle_event(TerminalEvent("x"))

        view = session.view()

        assert view.active_channel == "#general"
        assert view.input_text == "x"
        assert [c.key for c in view.channels] == ["C1", "C2"]
        assert view.show_log is False

    @pytest.mark.asyncio
    async def test_toggle_log(self, session):
        session.handle_event(TerminalEvent("<C-d>"))
        assert session.view().show_log is True
        session.handle_event(TerminalEvent("<C-d>"))
        assert session.view().show_log is False

    @pytest.mark.asyncio
    async def test_unknown_active_channel(self, session):
        session.active_channel = "CX"
        assert session.view().active_channel == UNKNOWN_CHANNEL


class TestRun:
    """Tests for the consumer loop."""

    @pytest.mark.asyncio
    async def test_shutdown_key_interrupts(self, remote):
        terminal = FakeTerminal([TerminalEvent("a"), TerminalEvent("<C-c>")])

        reason = await Session(remote, terminal).run()

        assert reason is SessionExit.INTERRUPTED
        assert terminal.initialized and terminal.closed
        assert terminal.frames

    @pytest.mark.asyncio
    async def test_escape_interrupts(self, remote):
        terminal = FakeTerminal([TerminalEvent("<Escape>")])
        assert await Session(remote, terminal).run() is SessionExit.INTERRUPTED

    @pytest.mark.asyncio
    async def test_drains_when_sources_end(self, remote):
        """Test the loop ends once every producer has finished."""
        terminal = FakeTerminal()
        session = Session(remote, terminal)

        reason = await session.run()

        assert reason is SessionExit.DRAINED
        assert terminal.closed
        assert session.self_id == "U0"
        assert list(session.directory.channels) == ["C1", "C2", "C3"]
        assert "Loaded 3 channels" in diagnostics(session)
        assert "Loaded 2 users" in diagnostics(session)

    @pytest.mark.asyncio
    async def test_quit_command(self, remote):
        terminal = FakeTerminal(key_events("/quit"))
        assert await Session(remote, terminal).run() is SessionExit.INTERRUPTED

    @pytest.mark.asyncio
    async def test_terminal_released_on_error(self, remote):
        """Test the terminal is closed when the loop fails."""
        terminal = FakeTerminal(paint_error=RuntimeError("paint failed"))

        with pytest.raises(RuntimeError, match="paint failed"):
            await Session(remote, terminal).run()

        assert terminal.closed

    @pytest.mark.asyncio
    async def test_connection_error_is_diagnostic(self, channels, users):
        remote = FakeRemoteClient(channels=channels, users=users, connect_error="socket closed")
        session = Session(remote, FakeTerminal())

        assert await session.run() is SessionExit.DRAINED
        assert "connection error: socket closed" in diagnostics(session)

    @pytest.mark.asyncio
    async def test_directory_failure_is_diagnostic(self, remote):
        remote.failures.add("loading channels")
        session = Session(remote, FakeTerminal())

        await session.run()

        assert "loading channels failed: boom" in diagnostics(session)
        assert dict(session.directory.channels) == {}
