from __future__ import annotations

"""
Связка между событиями редактора и IndentEngine.

Модуль не зависит от Qt: редактор виден только через протокол
TextEditorHost, поэтому логику можно тестировать на простых заглушках.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Protocol

from IndentEngine import compute_insertion, is_autoindent_change

logger = logging.getLogger(__name__)


@dataclass(frozen=True, order=True)
class Position:
    """Zero-based line and character offset, ordered by line then character."""

    line: int
    character: int


@dataclass(frozen=True)
class Selection:
    anchor: Position
    active: Position

    @property
    def start(self) -> Position:
        """The earlier endpoint; equal endpoints mean an empty selection."""
        return min(self.anchor, self.active)


@dataclass(frozen=True)
class ContentChange:
    """One discrete change of a document-change notification."""

    start: Position
    text: str


@dataclass(frozen=True)
class Insertion:
    position: Position
    text: str


@dataclass
class EditTransaction:
    """Scoped edit session.

    Insertions queued inside the ``with`` block are handed to ``apply`` in one
    batch on normal exit. If the block raises, nothing is applied.
    """

    apply: Callable[[List[Insertion]], None]
    insertions: List[Insertion] = field(default_factory=list)

    def insert(self, position: Position, text: str) -> None:
        self.insertions.append(Insertion(position, text))

    def __enter__(self) -> EditTransaction:
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            self.apply(list(self.insertions))
        self.insertions.clear()
        return False


class TextEditorHost(Protocol):
    """The part of an editor the coordinator needs."""

    def line_text(self, line: int) -> str: ...

    def line_end(self, line: int) -> Position: ...

    def selections(self) -> List[Selection]: ...

    def edit(self) -> EditTransaction: ...


class ActiveEditor:
    """Currently focused editor.

    Written only by the focus-change callback, read synchronously from
    event handlers on the same thread.
    """

    def __init__(self, editor: Optional[TextEditorHost] = None) -> None:
        self.current = editor

    def set(self, editor: Optional[TextEditorHost]) -> None:
        self.current = editor


class EditCoordinator:
    """Runs the explicit indent command and corrects linear auto-indent."""

    def __init__(self, tab_size: Callable[[], int]) -> None:
        self._tab_size = tab_size

    def indent_selections(self, editor: TextEditorHost) -> None:
        """Advance every selection's line to the next Fibonacci level."""
        tab_size = self._tab_size()
        with editor.edit() as edit:
            for selection in editor.selections():
                self._indent_at(editor, edit, selection.start, tab_size, force_advance=True)

    def fix_autoindent(self, editor: Optional[TextEditorHost], changes: Iterable[ContentChange]) -> None:
        """Snap lines produced by the editor's own auto-indent onto a Fibonacci level."""
        if editor is None:
            return
        targets = [
            editor.line_end(change.start.line + 1)
            for change in changes
            if is_autoindent_change(change.text)
        ]
        if not targets:
            return
        tab_size = self._tab_size()
        with editor.edit() as edit:
            for position in targets:
                self._indent_at(editor, edit, position, tab_size, force_advance=False)

    def _indent_at(
        self,
        editor: TextEditorHost,
        edit: EditTransaction,
        position: Position,
        tab_size: int,
        force_advance: bool,
    ) -> None:
        leading = editor.line_text(position.line)[: position.character]
        text = compute_insertion(leading, position.character, tab_size, force_advance)
        logger.debug(
            "indent line %d col %d: +%d (force_advance=%s)",
            position.line,
            position.character,
            len(text),
            force_advance,
        )
        edit.insert(position, text)
