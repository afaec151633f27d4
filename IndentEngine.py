from __future__ import annotations

"""
Вычисление отступов по последовательности Фибоначчи.

Эти функции не зависят от Qt и могут использоваться и
тестироваться отдельно от GUI. EditCoordinator делегирует им
расчёт ширины отступа и строки для вставки.
"""

from dataclasses import dataclass
from typing import Final, Iterator

WHITESPACE: Final[str] = " \t"


@dataclass(frozen=True)
class InsertionPlan:
    """Current indent width, the column to align to and the spaces bridging them."""

    width: int
    target: int
    text: str


def fibonacci_levels(tab_size: int) -> Iterator[int]:
    """Yield T, T, 2T, 3T, 5T, ... for the seed T = tab_size."""
    current, following = tab_size, tab_size
    while True:
        yield current
        current, following = following, current + following


def is_whitespace_run(text: str) -> bool:
    """True if text is non-empty and consists only of spaces and tabs."""
    if not text:
        return False
    for char in text:
        if char not in WHITESPACE:
            return False
    return True


def indent_width(text: str, tab_size: int) -> int:
    """Column count of text: a tab counts as tab_size, a space as 1."""
    width = 0
    for char in text:
        if char == "\t":
            width += tab_size
        elif char == " ":
            width += 1
    return width


def plan_insertion(leading_text: str, cursor_column: int, tab_size: int, force_advance: bool) -> InsertionPlan:
    """Вернуть план вставки для выравнивания по следующему уровню.

    leading_text — текст от начала строки до cursor_column.
    force_advance — всегда переходить на следующий уровень, даже если
    текущая ширина уже совпадает с числом последовательности.
    """
    if not is_whitespace_run(leading_text):
        # Строка ещё без отступа: первый уровень
        return InsertionPlan(0, tab_size, " " * tab_size)

    width = indent_width(leading_text[:cursor_column], tab_size)

    current, following = tab_size, tab_size
    while following <= width:
        current, following = following, current + following

    # Between two levels we always round up, never down.
    if not force_advance and width == current:
        target = current
    else:
        target = following
    return InsertionPlan(width, target, " " * (target - width))


def compute_insertion(leading_text: str, cursor_column: int, tab_size: int, force_advance: bool) -> str:
    """Spaces to insert at cursor_column so the line lands on a Fibonacci level."""
    return plan_insertion(leading_text, cursor_column, tab_size, force_advance).text


def is_autoindent_change(text: str) -> bool:
    """True if text is exactly one newline followed by a run of spaces/tabs.

    That is the shape of a linear auto-indent done by the editor after Enter.
    """
    return len(text) > 1 and text[0] == "\n" and is_whitespace_run(text[1:])
