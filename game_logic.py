from telegram import InlineKeyboardMarkup, InlineKeyboardButton
from typing import Dict, Optional

# Импортируем необходимые элементы из других модулей
from config import SYMBOLS, EMPTY_CELL_SYMBOL, DIFFICULTY_LABELS, logger
from game_state import Board, Cell, Difficulty, GameStatus, SessionState, WinLine, WIN_LINES, BOARD_SIZE

BUSY_MARK = "⏳"


def find_winning_line(board: Board) -> Optional[WinLine]:
    """Находит выигрышную линию для подсветки.

    Проверяет строки сверху вниз, затем столбцы слева направо, затем
    диагонали (от левого верхнего угла, от правого верхнего угла) и
    возвращает первую линию из символа победителя.

    Args:
        board: доска с сервера.
    Returns:
        Кортеж из трёх координат (row, col) или None, если победителя нет
        или линия не найдена.
    """
    status = board.status
    if status.kind != GameStatus.WIN:
        return None

    winner = status.winner
    for line in WIN_LINES:
        if all(board.cells[r][c] is winner for r, c in line):
            return line

    # Сервер сообщил о победе, а линии нет: просто не подсвечиваем
    logger.warning(f"Status {status} reported but no winning line found on {board.to_payload()['cells']}")
    return None


def status_message(board: Board) -> str:
    """Текст статуса для доски, как его формирует сервер"""
    status = board.status
    if status.kind == GameStatus.WIN:
        return f"player {status.winner.value} wins!!!"
    if status.kind == GameStatus.DRAW:
        return "game ended in a draw!"
    return f"current player: {board.current_player.value}"


def get_symbol_emoji(cell: Cell, symbols: Dict[str, str], winning: bool = False) -> str:
    """Возвращает эмодзи для клетки.

    Args:
        cell: значение клетки.
        symbols: словарь символов (см. config.SYMBOLS).
        winning: клетка входит в выигрышную линию.
    Returns:
        Строка с эмодзи или fallback-символ.
    """
    if cell is Cell.EMPTY:
        return symbols.get(EMPTY_CELL_SYMBOL, "⬜")
    if winning:
        return symbols.get(f"{cell.value}_win", f"⭐{cell.value}⭐")
    return symbols.get(cell.value, cell.value)


def render_text(state: SessionState) -> str:
    """Текст сообщения с игрой"""
    text = state.message
    if state.busy:
        text = f"{BUSY_MARK} {text}"
    return text


def get_keyboard(state: SessionState, difficulty: Difficulty, symbols: Optional[Dict[str, str]] = None) -> InlineKeyboardMarkup:
    """Создает InlineKeyboard с игровым полем и кнопками управления.

    Args:
        state: снимок сессии оркестратора.
        difficulty: выбранная в чате сложность.
        symbols: словарь символов, по умолчанию config.SYMBOLS.
    Returns:
        InlineKeyboardMarkup с текущим полем.
    """
    symbols = symbols or SYMBOLS
    board = state.board
    winning = set(state.highlighted_line or ())
    # Кнопки поля не кликабельны, пока идёт запрос или игра окончена
    accepts_moves = not state.busy and board.status.is_in_progress
    keyboard = []

    for row in range(BOARD_SIZE):
        buttons = []
        for col in range(BOARD_SIZE):
            cell = board.cells[row][col]
            cell_text = get_symbol_emoji(cell, symbols, winning=(row, col) in winning)
            callback_data = "noop"
            if accepts_moves and cell is Cell.EMPTY:
                callback_data = f"cell_{row}_{col}"
            buttons.append(InlineKeyboardButton(cell_text, callback_data=callback_data))
        keyboard.append(buttons)

    keyboard.append([InlineKeyboardButton("🔄 New game", callback_data="new_game")])

    difficulty_row = []
    for option in Difficulty:
        label = DIFFICULTY_LABELS.get(option.value, option.value)
        if option is difficulty:
            label = f"✅ {label}"
        difficulty_row.append(InlineKeyboardButton(label, callback_data=f"difficulty_{option.value}"))
    keyboard.append(difficulty_row)

    logger.debug(f"[get_keyboard] Board: {board.to_payload()}, Busy: {state.busy}, Winning: {state.highlighted_line}")
    return InlineKeyboardMarkup(keyboard)
