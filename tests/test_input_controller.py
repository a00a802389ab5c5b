"""Tests for the line editor."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from rich.cells import cell_len

from conftest import RecordingOutput, ScriptedKeyReader, enter, keys_for
from liquid_prompt.completion import CompletionEngine
from liquid_prompt.core.input_controller import InputController, UnhandledKeyError
from liquid_prompt.core.keys import KeyEvent, KeyKind
from liquid_prompt.core.terminal import Terminal


def key(kind):
    return KeyEvent.of(kind)


@pytest.fixture
def listing():
    return ["alpha.txt", "alphabet.txt", "beta"]


@pytest.fixture
def controller(terminal, ui, listing):
    engine = CompletionEngine(lister=lambda directory: list(listing))
    return InputController(terminal, ui, completion=engine)


def feed(controller, session, events):
    committed = False
    for event in events:
        committed = controller.handle_key(event, session)
    return committed


def assert_in_step(controller, session):
    terminal = controller.terminal
    buffer = session.buffer
    expected = cell_len(buffer.text[: buffer.cursor])
    assert terminal.row * terminal.width + terminal.column == expected


class TestEditing:
    def test_typing_echoes_and_advances(self, controller, session, output):
        feed(controller, session, keys_for("abc"))
        assert session.buffer.text == "abc"
        assert output.written == "abc"
        assert_in_step(controller, session)

    def test_insert_in_middle_redraws_tail(self, controller, session, output):
        feed(controller, session, keys_for("ac") + [key(KeyKind.LEFT)] + keys_for("b"))
        assert session.buffer.text == "abc"
        assert session.buffer.cursor == 2
        assert output.written.endswith("bc")
        assert_in_step(controller, session)

    def test_backspace_removes_previous_character(self, controller, session):
        feed(controller, session, keys_for("ab") + [key(KeyKind.BACKSPACE)])
        assert session.buffer.text == "a"
        assert session.buffer.cursor == 1
        assert_in_step(controller, session)

    def test_backspace_at_start_does_nothing(self, controller, session, output):
        controller.handle_key(key(KeyKind.BACKSPACE), session)
        assert session.buffer.text == ""
        assert output.events == []

    def test_delete_blanks_shifted_tail(self, controller, session, output):
        feed(
            controller,
            session,
            keys_for("abc") + [key(KeyKind.LEFT), key(KeyKind.LEFT), key(KeyKind.DELETE)],
        )
        assert session.buffer.text == "ac"
        assert session.buffer.cursor == 1
        assert output.written.endswith("c ")
        assert_in_step(controller, session)

    def test_arrows_stop_at_edges(self, controller, session, output):
        feed(controller, session, keys_for("a"))
        output.events.clear()

        feed(controller, session, [key(KeyKind.RIGHT), key(KeyKind.LEFT), key(KeyKind.LEFT)])
        assert session.buffer.cursor == 0
        assert output.events == [("backward", 1)]

    def test_cursor_tracks_wrapped_line(self, session, ui, console):
        terminal = Terminal(RecordingOutput(columns=10), console)
        controller = InputController(terminal, ui)

        feed(controller, session, keys_for("x" * 25))
        assert (terminal.column, terminal.row) == (5, 2)

        feed(controller, session, [key(KeyKind.LEFT)] * 7)
        assert (terminal.column, terminal.row) == (8, 1)
        assert_in_step(controller, session)

        feed(controller, session, [key(KeyKind.BACKSPACE)] * 9)
        assert session.buffer.text == "x" * 16
        assert_in_step(controller, session)


    @pytest.mark.parametrize("cursor", range(7))
    def test_insert_then_backspace_restores_line(self, session, ui, console, cursor):
        terminal = Terminal(RecordingOutput(columns=4), console)
        controller = InputController(terminal, ui)
        feed(controller, session, keys_for("abcdef"))
        feed(controller, session, [key(KeyKind.LEFT)] * (6 - cursor))
        before = (terminal.column, terminal.row)

        feed(controller, session, keys_for("x") + [key(KeyKind.BACKSPACE)])
        assert session.buffer.text == "abcdef"
        assert session.buffer.cursor == cursor
        assert (terminal.column, terminal.row) == before
        assert_in_step(controller, session)

    def test_wide_characters_move_by_cells(self, session, ui, console):
        terminal = Terminal(RecordingOutput(columns=10), console)
        controller = InputController(terminal, ui)

        feed(controller, session, keys_for("\u4f60\u597d"))
        assert (terminal.column, terminal.row) == (4, 0)

        terminal.output.events.clear()
        controller.handle_key(key(KeyKind.LEFT), session)
        assert terminal.output.events == [("backward", 2)]

        controller.handle_key(key(KeyKind.BACKSPACE), session)
        assert session.buffer.text == "\u597d"
        assert terminal.output.written.endswith("\u597d  ")
        assert terminal.column == 0
        assert_in_step(controller, session)


class TestHistoryRecall:
    @pytest.fixture
    def with_history(self, session):
        session.history.append("first")
        session.history.append("second")
        return session

    def test_up_and_down(self, controller, with_history):
        session = with_history
        expected = [
            (KeyKind.UP, "second"),
            (KeyKind.UP, "first"),
            (KeyKind.UP, "first"),
            (KeyKind.DOWN, "second"),
            (KeyKind.DOWN, ""),
            (KeyKind.DOWN, ""),
        ]
        for kind, text in expected:
            controller.handle_key(key(kind), session)
            assert session.buffer.text == text
            assert_in_step(controller, session)

    def test_recall_blanks_longer_line(self, controller, with_history, output):
        feed(controller, with_history, keys_for("a much longer line"))
        output.events.clear()

        controller.handle_key(key(KeyKind.UP), with_history)
        assert with_history.buffer.text == "second"
        assert " " * len("a much longer line") in output.written
        assert_in_step(controller, with_history)

    def test_down_on_empty_history_clears_line(self, controller, session):
        feed(controller, session, keys_for("draft"))
        controller.handle_key(key(KeyKind.DOWN), session)
        assert session.buffer.text == ""


class TestCompletion:
    def test_extend_then_cycle(self, controller, session):
        feed(controller, session, keys_for("cat alp") + [key(KeyKind.TAB)])
        assert session.buffer.text == "cat alpha.txt"
        assert_in_step(controller, session)

        controller.handle_key(key(KeyKind.TAB), session)
        assert session.buffer.text == "cat alphabet.txt"
        assert_in_step(controller, session)

        controller.handle_key(key(KeyKind.TAB), session)
        assert session.buffer.text == "cat beta"
        assert_in_step(controller, session)

    def test_no_match_rings_bell(self, controller, session, output):
        feed(controller, session, keys_for("cat zz"))
        controller.handle_key(key(KeyKind.TAB), session)
        assert session.buffer.text == "cat zz"
        assert output.count("bell") == 1

    def test_completes_from_end_of_line(self, controller, session):
        feed(controller, session, keys_for("cat be") + [key(KeyKind.LEFT)] * 3)
        controller.handle_key(key(KeyKind.TAB), session)
        assert session.buffer.text == "cat beta"
        assert session.buffer.cursor == len("cat beta")
        assert_in_step(controller, session)


class TestLineControl:
    def test_enter_commits(self, controller, session, output):
        feed(controller, session, keys_for("ls"))
        assert controller.handle_key(enter(), session)
        assert session.buffer.text == "ls"
        assert output.events[-1] == ("write_raw", "\r\n")

    def test_interrupt_abandons_line(self, controller, session, output):
        feed(controller, session, keys_for("rm -rf"))
        assert controller.handle_key(key(KeyKind.INTERRUPT), session)
        assert session.buffer.text == ""
        assert "^C" in output.written

    def test_list_directory_redraws_prompt_and_line(
        self, terminal, ui, session, console_text, output
    ):
        (session.working_directory / "notes.md").write_text("")
        controller = InputController(terminal, ui)
        draw_prompt = MagicMock()

        feed(controller, session, keys_for("cat n"))
        output.events.clear()
        controller.handle_key(key(KeyKind.LIST_DIRECTORY), session, draw_prompt)

        assert "notes.md" in console_text()
        draw_prompt.assert_called_once()
        assert output.written == "cat n"
        assert session.buffer.text == "cat n"

    def test_unhandled_key_alerts(self, controller, session, console_text):
        event = KeyEvent(KeyKind.UNHANDLED, name="f5")
        assert not controller.handle_key(event, session)
        assert (
            "Application has experienced an error with the following message: "
            "'Missing special key handling: f5'" in console_text()
        )

    def test_unhandled_key_raises_in_debug(self, controller, session, monkeypatch):
        monkeypatch.setenv("LIQUID_PROMPT_DEBUG", "1")
        with pytest.raises(UnhandledKeyError) as info:
            controller.handle_key(KeyEvent(KeyKind.UNHANDLED, name="f5"), session)
        assert info.value.key_name == "f5"


class TestReadLine:
    def test_returns_committed_text(self, controller, session):
        draw_prompt = MagicMock()
        session.buffer.insert("stale")
        reader = ScriptedKeyReader(keys_for("pwd") + [enter()])

        assert controller.read_line(session, reader, draw_prompt) == "pwd"
        draw_prompt.assert_called_once()

    def test_cancelled_session_returns_none(self, controller, session):
        session.cancel()
        reader = ScriptedKeyReader(keys_for("pwd"))
        assert controller.read_line(session, reader, MagicMock()) is None
