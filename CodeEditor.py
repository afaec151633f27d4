from typing import List

from PyQt5.QtCore import Qt, QTimer, pyqtSignal, pyqtSlot
from PyQt5.QtGui import QFont, QTextCursor
from PyQt5.QtWidgets import QPlainTextEdit

from EditCoordinator import ContentChange, EditTransaction, Insertion, Position, Selection

# QTextCursor.selectedText() returns block breaks as U+2029
PARAGRAPH_SEPARATOR = "\u2029"


class CodeEditor(QPlainTextEdit):
	"""QPlainTextEdit exposing lines, selections, changes and edit transactions."""

	indentRequested = pyqtSignal()
	contentChanges = pyqtSignal(list)

	def __init__(self, tab_size: int = 4) -> None:
		super().__init__()
		font = QFont("Consolas", 11)
		font.setStyleHint(QFont.StyleHint.Monospace)
		self.setFont(font)
		self._tab_size = tab_size
		self.set_tab_size(tab_size)
		self._pending_changes: List[ContentChange] = []
		self.document().contentsChange.connect(self._on_contents_change)
		self.setLineWrapMode(QPlainTextEdit.LineWrapMode.WidgetWidth)

	@property
	def tab_size(self) -> int:
		return self._tab_size

	def set_tab_size(self, size: int) -> None:
		"""Set tab size in columns; also moves the visual tab stops."""
		self._tab_size = size
		self.setTabStopDistance(self.fontMetrics().horizontalAdvance(" ") * size)

	def load_text(self, text: str) -> None:
		"""Replace the whole text without reporting it as a content change."""
		self.setPlainText(text)
		self._pending_changes = []
		self.document().setModified(False)

	def set_word_wrap_enabled(self, enabled: bool) -> None:
		"""Включить/выключить перенос строк по ширине виджета."""
		mode = QPlainTextEdit.LineWrapMode.WidgetWidth if enabled else QPlainTextEdit.LineWrapMode.NoWrap
		self.setLineWrapMode(mode)

	# --------- text editor host interface ---------

	def line_text(self, line: int) -> str:
		block = self.document().findBlockByNumber(line)
		return block.text() if block.isValid() else ""

	def line_end(self, line: int) -> Position:
		return Position(line, len(self.line_text(line)))

	def selections(self) -> List[Selection]:
		cursor = self.textCursor()
		return [Selection(self._position_at(cursor.anchor()), self._position_at(cursor.position()))]

	def edit(self) -> EditTransaction:
		return EditTransaction(self.apply_edits)

	def apply_edits(self, insertions: List[Insertion]) -> None:
		"""Apply insertions as a single undo step."""
		pending = [insertion for insertion in insertions if insertion.text]
		if not pending:
			return
		cursor = QTextCursor(self.document())
		cursor.beginEditBlock()
		# С конца документа, чтобы более ранние позиции не сдвигались
		for insertion in sorted(pending, key=lambda i: i.position, reverse=True):
			cursor.setPosition(self._offset_of(insertion.position))
			cursor.insertText(insertion.text)
		cursor.endEditBlock()

	def _position_at(self, offset: int) -> Position:
		block = self.document().findBlock(offset)
		return Position(block.blockNumber(), offset - block.position())

	def _offset_of(self, position: Position) -> int:
		block = self.document().findBlockByNumber(position.line)
		if not block.isValid():
			block = self.document().lastBlock()
		return block.position() + min(position.character, block.length() - 1)

	# --------- change notifications ---------

	def _on_contents_change(self, position: int, removed: int, added: int) -> None:
		if added <= 0:
			return
		document = self.document()
		end = min(position + added, document.characterCount() - 1)
		if end <= position:
			return
		cursor = QTextCursor(document)
		cursor.setPosition(position)
		cursor.setPosition(end, QTextCursor.MoveMode.KeepAnchor)
		text = cursor.selectedText().replace(PARAGRAPH_SEPARATOR, "\n")
		# Enter и нажатия клавиш сбрасывают очередь сами; таймер нужен
		# для остальных правок, и никогда не изнутри уведомления документа
		if not self._pending_changes:
			QTimer.singleShot(0, self._flush_content_changes)
		self._pending_changes.append(ContentChange(self._position_at(position), text))

	@pyqtSlot()
	def _flush_content_changes(self) -> None:
		changes, self._pending_changes = self._pending_changes, []
		if changes:
			self.contentChanges.emit(changes)

	# --------- keys ---------

	def keyPressEvent(self, event):  # type: ignore[override]
		# Изменения от предыдущей клавиши обрабатываются до следующей
		self._flush_content_changes()
		key = event.key()

		if key in (Qt.Key.Key_Return, Qt.Key.Key_Enter):
			self.insert_newline_with_indentation()
			return

		if key == Qt.Key.Key_Tab:
			if self.receivers(self.indentRequested) > 0:
				self.indentRequested.emit()
			else:
				self.textCursor().insertText(" " * self._tab_size)
			return

		super().keyPressEvent(event)

	def insert_newline_with_indentation(self) -> None:
		"""Newline plus a copy of the current line's leading whitespace."""
		cursor = self.textCursor()
		cursor.beginEditBlock()
		cursor.removeSelectedText()
		prefix = cursor.block().text()[: cursor.positionInBlock()]
		leading = prefix[: len(prefix) - len(prefix.lstrip(" \t"))]
		cursor.insertText("\n" + leading)
		cursor.endEditBlock()
		self.setTextCursor(cursor)
		# Correction must see the new line before anything else is typed.
		self._flush_content_changes()
