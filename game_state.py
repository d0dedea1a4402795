"""
Модель состояния игры: клетки, статус, доска и снимок сессии.
Доска приходит с игрового сервера и проверяется здесь перед использованием.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from errors import MalformedStateError

BOARD_SIZE = 3

Coord = tuple[int, int]
WinLine = tuple[Coord, Coord, Coord]


class Cell(Enum):
    """Значение клетки. Значения совпадают с форматом сервера."""
    EMPTY = "Empty"
    X = "X"
    O = "O"


class Difficulty(Enum):
    """Сложность ИИ, передаётся серверу в каждом запросе хода ИИ"""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class Phase(Enum):
    """Состояния оркестратора"""
    IDLE = "idle"
    READY = "ready"
    SUBMITTING_MOVE = "submitting_move"
    AWAITING_AI = "awaiting_ai"
    TERMINAL = "terminal"


@dataclass(frozen=True)
class GameStatus:
    """Ровно одно из: InProgress, Draw, Win(symbol)"""
    kind: str
    winner: Optional[Cell] = None

    IN_PROGRESS = "InProgress"
    DRAW = "Draw"
    WIN = "Win"

    @classmethod
    def in_progress(cls) -> "GameStatus":
        return cls(cls.IN_PROGRESS)

    @classmethod
    def draw(cls) -> "GameStatus":
        return cls(cls.DRAW)

    @classmethod
    def win(cls, symbol: Cell) -> "GameStatus":
        if symbol not in (Cell.X, Cell.O):
            raise ValueError(f"winner must be X or O, got {symbol}")
        return cls(cls.WIN, symbol)

    @property
    def is_in_progress(self) -> bool:
        return self.kind == self.IN_PROGRESS

    @property
    def is_terminal(self) -> bool:
        return not self.is_in_progress

    def to_payload(self) -> Any:
        if self.kind == self.WIN:
            return {"Winner": self.winner.value}
        return self.kind

    def __str__(self) -> str:
        if self.kind == self.WIN:
            return f"Win({self.winner.value})"
        return self.kind


Cells = tuple[tuple[Cell, ...], ...]


def _empty_cells() -> Cells:
    return tuple(tuple(Cell.EMPTY for _ in range(BOARD_SIZE)) for _ in range(BOARD_SIZE))


@dataclass(frozen=True)
class Board:
    """Снимок игры: поле 3x3, чей ход и статус. Не изменяется после создания."""
    cells: Cells = field(default_factory=_empty_cells)
    current_player: Cell = Cell.X
    status: GameStatus = field(default_factory=GameStatus.in_progress)

    @classmethod
    def new(cls) -> "Board":
        """Пустое поле, ходит X, игра идёт"""
        return cls()

    def count(self, symbol: Cell) -> int:
        return sum(1 for row in self.cells for cell in row if cell is symbol)

    def to_payload(self) -> dict:
        return {
            "cells": [[cell.value for cell in row] for row in self.cells],
            "current_player": self.current_player.value,
            "status": self.status.to_payload(),
        }


@dataclass(frozen=True)
class SessionState:
    """Снимок сессии, который читает слой отрисовки"""
    board: Board = field(default_factory=Board.new)
    busy: bool = False
    message: str = "Loading game..."
    highlighted_line: Optional[WinLine] = None
    phase: Phase = Phase.IDLE


def _build_lines() -> list[WinLine]:
    rows = [tuple((r, c) for c in range(BOARD_SIZE)) for r in range(BOARD_SIZE)]
    cols = [tuple((r, c) for r in range(BOARD_SIZE)) for c in range(BOARD_SIZE)]
    main_diag = tuple((i, i) for i in range(BOARD_SIZE))
    anti_diag = tuple((i, BOARD_SIZE - 1 - i) for i in range(BOARD_SIZE))
    return rows + cols + [main_diag, anti_diag]


# Все линии в порядке проверки: строки сверху вниз, столбцы слева направо,
# затем диагонали (слева сверху, справа сверху)
WIN_LINES: list[WinLine] = _build_lines()


def has_line(cells: Cells, symbol: Cell) -> bool:
    return any(all(cells[r][c] is symbol for r, c in line) for line in WIN_LINES)


def is_cell_playable(board: Board, row: int, col: int) -> bool:
    """Можно ли сходить в клетку: игра идёт и клетка пуста"""
    if not (0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE):
        return False
    return board.status.is_in_progress and board.cells[row][col] is Cell.EMPTY


def _parse_cell(value: Any) -> Cell:
    try:
        return Cell(value)
    except ValueError:
        raise MalformedStateError(f"unknown cell symbol: {value!r}") from None


def _parse_status(value: Any) -> GameStatus:
    if value == GameStatus.IN_PROGRESS:
        return GameStatus.in_progress()
    if value == GameStatus.DRAW:
        return GameStatus.draw()
    # победитель приходит как {"Winner": "X"}
    if isinstance(value, dict) and list(value) == ["Winner"]:
        winner = _parse_cell(value["Winner"])
        if winner is Cell.EMPTY:
            raise MalformedStateError("winner cannot be Empty")
        return GameStatus.win(winner)
    raise MalformedStateError(f"unknown status: {value!r}")


def parse_board(payload: Any) -> Board:
    """Проверяет ответ сервера и собирает из него Board.

    Args:
        payload: словарь вида {"cells": [[...]], "current_player": "X", "status": ...}
    Returns:
        Проверенная доска.
    Raises:
        MalformedStateError: если форма, символы, статус или инварианты не сходятся.
    """
    if not isinstance(payload, dict):
        raise MalformedStateError(f"board must be an object, got {type(payload).__name__}")
    for key in ("cells", "current_player", "status"):
        if key not in payload:
            raise MalformedStateError(f"board is missing '{key}'")

    raw_cells = payload["cells"]
    if not isinstance(raw_cells, list) or len(raw_cells) != BOARD_SIZE:
        raise MalformedStateError("board must have 3 rows")
    rows = []
    for raw_row in raw_cells:
        if not isinstance(raw_row, list) or len(raw_row) != BOARD_SIZE:
            raise MalformedStateError("every row must have 3 cells")
        rows.append(tuple(_parse_cell(value) for value in raw_row))
    cells: Cells = tuple(rows)

    current_player = _parse_cell(payload["current_player"])
    if current_player is Cell.EMPTY:
        raise MalformedStateError("current player must be X or O")
    status = _parse_status(payload["status"])

    board = Board(cells=cells, current_player=current_player, status=status)
    _check_invariants(board)
    return board


def _check_invariants(board: Board) -> None:
    x_count = board.count(Cell.X)
    o_count = board.count(Cell.O)
    if x_count - o_count not in (0, 1):
        raise MalformedStateError(f"impossible move counts: X={x_count}, O={o_count}")

    status = board.status
    if status.kind == GameStatus.WIN and not has_line(board.cells, status.winner):
        raise MalformedStateError(f"status {status} without a winning line")
    if status.kind == GameStatus.DRAW and board.count(Cell.EMPTY):
        raise MalformedStateError("draw reported on a board with empty cells")
    if status.is_in_progress:
        expected = Cell.X if x_count == o_count else Cell.O
        if board.current_player is not expected:
            raise MalformedStateError(
                f"{board.current_player.value} to move, but {expected.value} is next by move count"
            )
