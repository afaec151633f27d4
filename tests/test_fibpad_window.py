import json

import pytest
from PyQt5.QtCore import QEvent, Qt
from PyQt5.QtGui import QKeyEvent, QTextCursor
from PyQt5.QtWidgets import QApplication

from FibPadWindow import FibPadWindow


@pytest.fixture
def window(qapp, tmp_path) -> FibPadWindow:
    return FibPadWindow(settings_path=tmp_path / "settings.json")


def _move_to_end(editor) -> None:
    cursor = editor.textCursor()
    cursor.movePosition(QTextCursor.MoveOperation.End)
    editor.setTextCursor(cursor)


def _type_enter_at_end(editor) -> None:
    _move_to_end(editor)
    editor.insert_newline_with_indentation()
    QApplication.processEvents()


def _load(editor, text: str) -> None:
    editor.setPlainText(text)
    QApplication.processEvents()


def _press_tab(editor) -> None:
    editor.keyPressEvent(QKeyEvent(QEvent.Type.KeyPress, Qt.Key.Key_Tab, Qt.KeyboardModifier.NoModifier))


def test_window_starts_with_active_editor(window) -> None:
    assert window.active_editor is not None
    assert window.editors() == [window.active_editor]


def test_enter_after_exact_level_keeps_indent(window) -> None:
    editor = window.active_editor
    _load(editor, "        foo")
    _type_enter_at_end(editor)
    assert editor.toPlainText() == "        foo\n        "


def test_enter_between_levels_is_rounded_up(window) -> None:
    editor = window.active_editor
    _load(editor, "         foo")
    _type_enter_at_end(editor)
    assert editor.toPlainText() == "         foo\n" + " " * 12


def test_text_typed_right_after_enter_is_left_alone(window) -> None:
    """Набранный сразу после Enter текст не получает лишних пробелов в конце."""
    editor = window.active_editor
    _load(editor, "        foo")
    _move_to_end(editor)
    editor.insert_newline_with_indentation()
    editor.insertPlainText("x")
    QApplication.processEvents()
    QApplication.processEvents()
    assert editor.toPlainText() == "        foo\n        x"


def test_correction_is_applied_before_typed_text(window) -> None:
    editor = window.active_editor
    _load(editor, "         foo")
    _move_to_end(editor)
    editor.insert_newline_with_indentation()
    editor.insertPlainText("x")
    QApplication.processEvents()
    QApplication.processEvents()
    assert editor.toPlainText() == "         foo\n" + " " * 12 + "x"


def test_tab_advances_to_next_level(window) -> None:
    editor = window.active_editor
    editor.setPlainText("    x")
    cursor = editor.textCursor()
    cursor.setPosition(4)
    editor.setTextCursor(cursor)
    _press_tab(editor)
    assert editor.toPlainText() == "        x"
    _press_tab(editor)
    assert editor.toPlainText() == "            x"
    assert editor.textCursor().positionInBlock() == 12


def test_command_indents_active_editor(window) -> None:
    editor = window.active_editor
    command = window.command(FibPadWindow.INDENT_COMMAND)
    assert command is not None
    assert command.objectName() == "fibonacciIndent"
    command.trigger()
    assert editor.toPlainText() == "    "


def test_background_editor_is_not_corrected(window) -> None:
    first = window.active_editor
    second = window.new_file()
    assert window.active_editor is second
    _load(first, "         foo")
    _type_enter_at_end(first)
    assert first.toPlainText() == "         foo\n         "


def test_tab_size_setting_is_persisted_and_used(window, tmp_path) -> None:
    window.set_tab_size(2)
    editor = window.active_editor
    assert editor.tab_size == 2
    assert json.loads((tmp_path / "settings.json").read_text(encoding="utf-8"))["tab_size"] == 2
    _press_tab(editor)
    assert editor.toPlainText() == "  "


def test_open_path_adds_tab(window, tmp_path) -> None:
    source = tmp_path / "sample.txt"
    source.write_text("    a\n", encoding="utf-8")
    editor = window.open_path(source)
    assert editor is window.active_editor
    assert editor.toPlainText() == "    a\n"
    assert not editor.document().isModified()
    assert window.windowTitle() == "FibPad — sample.txt"


def test_opened_file_shaped_like_autoindent_is_not_rewritten(window, tmp_path) -> None:
    """Файл, совпадающий по форме с автоотступом, при открытии не меняется."""
    source = tmp_path / "blank.txt"
    source.write_text("\n   ", encoding="utf-8")
    editor = window.open_path(source)
    QApplication.processEvents()
    QApplication.processEvents()
    assert editor.toPlainText() == "\n   "
    assert not editor.document().isModified()


def test_close_deregisters_commands(window) -> None:
    window.show()
    assert window.close()
    assert window.command(FibPadWindow.INDENT_COMMAND) is None
