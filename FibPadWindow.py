from __future__ import annotations

import logging
from functools import partial
from pathlib import Path
from typing import Callable, Dict, List, Optional

from PyQt5.QtGui import QKeySequence
from PyQt5.QtWidgets import (
	QAction,
	QActionGroup,
	QFileDialog,
	QMainWindow,
	QMessageBox,
	QStatusBar,
	QTabWidget,
)

from CodeEditor import CodeEditor
from EditCoordinator import ActiveEditor, ContentChange, EditCoordinator
from Settings import SETTINGS_PATH, TAB_SIZE_CHOICES, load_settings, save_settings, tab_size_from

logger = logging.getLogger(__name__)


class FibPadWindow(QMainWindow):
	"""Main window: editor tabs, the Fibonacci indent command and settings."""

	INDENT_COMMAND = "fibonacciIndent"

	def __init__(self, settings_path: Optional[Path] = None) -> None:
		super().__init__()
		self.setWindowTitle("FibPad")
		self.resize(900, 650)
		self._settings_path = settings_path or SETTINGS_PATH
		self._settings = load_settings(self._settings_path)

		self._active_editor = ActiveEditor()
		self.coordinator = EditCoordinator(lambda: tab_size_from(self._settings))
		self._commands: Dict[str, QAction] = {}
		self._files: Dict[CodeEditor, Optional[Path]] = {}

		self.tabs = QTabWidget(self)
		self.tabs.setTabsClosable(True)
		self.tabs.currentChanged.connect(self._on_current_tab_changed)
		self.tabs.tabCloseRequested.connect(self._close_tab)
		self.setCentralWidget(self.tabs)

		self.status_bar = QStatusBar()
		self.setStatusBar(self.status_bar)

		self._create_actions()
		self._create_menu_bar()
		self._create_settings_menu()
		self._register_command(self.INDENT_COMMAND, "Fibonacci Indent", "Ctrl+]", self._run_indent_command)

		self.new_file()
		logger.info("Fibonacci indent activated")

	@property
	def active_editor(self) -> Optional[CodeEditor]:
		return self._active_editor.current

	def editors(self) -> List[CodeEditor]:
		return [self.tabs.widget(i) for i in range(self.tabs.count())]

	def command(self, command_id: str) -> Optional[QAction]:
		return self._commands.get(command_id)

	# --------- commands ---------

	def _register_command(self, command_id: str, text: str, shortcut: str, handler: Callable[[], None]) -> None:
		action = QAction(text, self)
		action.setObjectName(command_id)
		action.setShortcut(QKeySequence(shortcut))
		action.triggered.connect(lambda _checked=False: handler())
		self.edit_menu.addAction(action)
		self._commands[command_id] = action
		logger.info("Registered command %s", command_id)

	def _dispose_commands(self) -> None:
		for command_id, action in self._commands.items():
			self.edit_menu.removeAction(action)
			action.deleteLater()
			logger.info("Deregistered command %s", command_id)
		self._commands.clear()

	def _run_indent_command(self) -> None:
		editor = self._active_editor.current
		if editor is None:
			return
		self.coordinator.indent_selections(editor)

	def _on_content_changes(self, source: CodeEditor, changes: List[ContentChange]) -> None:
		# Only the focused editor is corrected
		editor = self._active_editor.current
		if editor is not source:
			return
		self.coordinator.fix_autoindent(editor, changes)

	def _on_current_tab_changed(self, index: int) -> None:
		widget = self.tabs.widget(index) if index >= 0 else None
		self._active_editor.set(widget if isinstance(widget, CodeEditor) else None)
		self._update_status()
		self._update_window_title()

	# --------- menus ---------

	def _create_actions(self) -> None:
		self.new_action = QAction("&New", self)
		self.new_action.setShortcut("Ctrl+N")
		self.new_action.triggered.connect(self.new_file)

		self.open_action = QAction("&Open…", self)
		self.open_action.setShortcut("Ctrl+O")
		self.open_action.triggered.connect(self.open_file)

		self.save_action = QAction("&Save", self)
		self.save_action.setShortcut("Ctrl+S")
		self.save_action.triggered.connect(self.save_file)

		self.save_as_action = QAction("Save &As…", self)
		self.save_as_action.setShortcut("Ctrl+Shift+S")
		self.save_as_action.triggered.connect(self.save_file_as)

		self.exit_action = QAction("E&xit", self)
		self.exit_action.setShortcut("Ctrl+Q")
		self.exit_action.triggered.connect(self.close)

	def _create_menu_bar(self) -> None:
		menu_bar = self.menuBar()
		file_menu = menu_bar.addMenu("&File")
		file_menu.addAction(self.new_action)
		file_menu.addAction(self.open_action)
		file_menu.addSeparator()
		file_menu.addAction(self.save_action)
		file_menu.addAction(self.save_as_action)
		file_menu.addSeparator()
		file_menu.addAction(self.exit_action)

		# Команды регистрируются сюда в _register_command
		self.edit_menu = menu_bar.addMenu("&Edit")

	def _create_settings_menu(self) -> None:
		settings_menu = self.menuBar().addMenu("&Settings")

		tab_menu = settings_menu.addMenu("Tab Size")
		action_group = QActionGroup(self)
		action_group.setExclusive(True)

		current = tab_size_from(self._settings)
		self.tab_size_actions: Dict[int, QAction] = {}
		for size in TAB_SIZE_CHOICES:
			action = QAction(str(size), self, checkable=True)
			action.setChecked(size == current)
			action.triggered.connect(lambda _checked=False, s=size: self.set_tab_size(s))
			action_group.addAction(action)
			tab_menu.addAction(action)
			self.tab_size_actions[size] = action

		settings_menu.addSeparator()
		self.word_wrap_action = QAction("Word Wrap", self, checkable=True)
		self.word_wrap_action.setChecked(bool(self._settings.get("word_wrap", True)))
		self.word_wrap_action.toggled.connect(self._toggle_word_wrap)
		settings_menu.addAction(self.word_wrap_action)

	def set_tab_size(self, size: int) -> None:
		self._settings["tab_size"] = size
		save_settings(self._settings, self._settings_path)
		for editor in self.editors():
			editor.set_tab_size(size)
		if size in self.tab_size_actions:
			self.tab_size_actions[size].setChecked(True)
		self._update_status()

	def _toggle_word_wrap(self, checked: bool) -> None:
		for editor in self.editors():
			editor.set_word_wrap_enabled(bool(checked))
		self._settings["word_wrap"] = bool(checked)
		save_settings(self._settings, self._settings_path)

	# --------- files ---------

	def _add_editor(self, title: str, text: str = "", path: Optional[Path] = None) -> CodeEditor:
		editor = CodeEditor(tab_size_from(self._settings))
		editor.set_word_wrap_enabled(bool(self._settings.get("word_wrap", True)))
		if text:
			editor.load_text(text)
		editor.indentRequested.connect(partial(self.coordinator.indent_selections, editor))
		editor.contentChanges.connect(partial(self._on_content_changes, editor))
		editor.cursorPositionChanged.connect(self._update_status)
		self._files[editor] = path
		index = self.tabs.addTab(editor, title)
		self.tabs.setCurrentIndex(index)
		return editor

	def new_file(self) -> CodeEditor:
		return self._add_editor("Untitled")

	def open_file(self) -> None:
		file_path, _ = QFileDialog.getOpenFileName(self, "Open File", str(Path.home()), "All Files (*.*)")
		if file_path:
			self.open_path(Path(file_path))

	def open_path(self, path: Path) -> Optional[CodeEditor]:
		try:
			with open(path, "r", encoding="utf-8") as fh:
				text = fh.read()
		except (OSError, UnicodeDecodeError) as exc:
			QMessageBox.critical(self, "Open File", f"Could not open {path}:\n{exc}")
			return None
		return self._add_editor(path.name, text, path)

	def save_file(self) -> None:
		editor = self._active_editor.current
		if editor is None:
			return
		path = self._files.get(editor)
		if path is None:
			self.save_file_as()
			return
		self._write_to_path(editor, path)

	def save_file_as(self) -> None:
		editor = self._active_editor.current
		if editor is None:
			return
		file_path, _ = QFileDialog.getSaveFileName(self, "Save File As", str(Path.home()), "All Files (*.*)")
		if file_path:
			path = Path(file_path)
			if self._write_to_path(editor, path):
				self._files[editor] = path
				self.tabs.setTabText(self.tabs.indexOf(editor), path.name)
				self._update_window_title()

	def _write_to_path(self, editor: CodeEditor, path: Path) -> bool:
		try:
			with open(path, "w", encoding="utf-8") as fh:
				fh.write(editor.toPlainText())
		except OSError as exc:
			QMessageBox.critical(self, "Save File", f"Could not save {path}:\n{exc}")
			return False
		editor.document().setModified(False)
		return True

	def _close_tab(self, index: int) -> None:
		editor = self.tabs.widget(index)
		if not self._maybe_discard_changes([editor]):
			return
		self.tabs.removeTab(index)
		self._files.pop(editor, None)
		editor.deleteLater()

	def closeEvent(self, event):  # type: ignore[override]
		if self._maybe_discard_changes(self.editors()):
			self._dispose_commands()
			event.accept()
		else:
			event.ignore()

	def _maybe_discard_changes(self, editors: List[CodeEditor]) -> bool:
		if not any(editor.document().isModified() for editor in editors):
			return True
		response = QMessageBox.warning(
			self,
			"Unsaved Changes",
			"There are unsaved changes. Do you want to continue without saving?",
			QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
			QMessageBox.StandardButton.No,
		)
		return response == QMessageBox.StandardButton.Yes

	# --------- status ---------

	def _update_status(self) -> None:
		editor = self._active_editor.current
		if editor is None:
			self.status_bar.clearMessage()
			return
		cursor = editor.textCursor()
		path = self._files.get(editor)
		name = str(path) if path else "Untitled"
		self.status_bar.showMessage(
			f"{name} — Line {cursor.blockNumber() + 1}, Column {cursor.positionInBlock() + 1} — Tab Size {editor.tab_size}"
		)

	def _update_window_title(self) -> None:
		editor = self._active_editor.current
		path = self._files.get(editor) if editor is not None else None
		suffix = f" — {path.name}" if path else ""
		self.setWindowTitle(f"FibPad{suffix}")
