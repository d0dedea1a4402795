"""Unit tests for win-line resolution, status messages and keyboard rendering."""
from game_logic import find_winning_line, get_keyboard, render_text, status_message
from game_state import Board, Cell, Difficulty, GameStatus, Phase, SessionState
from boards import make_board


def test_row_win_scenario():
    board = make_board(["XX.", "OOO", "X.."], current="O", status="O")
    assert find_winning_line(board) == ((1, 0), (1, 1), (1, 2))


def test_column_and_diagonal_wins():
    column = make_board(["OX.", "OX.", ".X."], current="X", status="X")
    assert find_winning_line(column) == ((0, 1), (1, 1), (2, 1))

    diagonal = make_board(["XO.", "OX.", "..X"], current="X", status="X")
    assert find_winning_line(diagonal) == ((0, 0), (1, 1), (2, 2))

    anti_diagonal = make_board(["XXO", "XO.", "O.."], current="O", status="O")
    assert find_winning_line(anti_diagonal) == ((0, 2), (1, 1), (2, 0))


def test_scan_order_prefers_rows_then_columns():
    # X заполняет и строку 0, и столбец 0
    board = make_board(["XXX", "XOO", "XOO"], current="X", status="X")
    assert find_winning_line(board) == ((0, 0), (0, 1), (0, 2))

    # столбец 2 и главная диагональ
    board = make_board(["XOX", "OXX", "OOX"], current="X", status="X")
    assert find_winning_line(board) == ((0, 2), (1, 2), (2, 2))


def test_winning_line_cells_all_match_winner():
    board = make_board(["OX.", "XO.", "X.O"], current="O", status="O")
    line = find_winning_line(board)
    assert line is not None
    assert all(board.cells[r][c] is Cell.O for r, c in line)


def test_no_line_for_in_progress_or_draw():
    assert find_winning_line(make_board(["XX.", "OO.", "..."])) is None
    assert find_winning_line(make_board(["XOX", "XOO", "OXX"], status="Draw")) is None


def test_inconsistent_win_gives_no_highlight():
    # Не через parse_board: такой ответ он бы отклонил
    board = Board(status=GameStatus.win(Cell.X))
    assert find_winning_line(board) is None


def test_status_messages():
    assert status_message(Board.new()) == "current player: X"
    assert status_message(make_board(["XXX", "OO.", "..."], status="X")) == "player X wins!!!"
    assert status_message(make_board(["XOX", "XOO", "OXX"], status="Draw")) == "game ended in a draw!"


def test_render_text_marks_busy():
    assert render_text(SessionState(message="AI is thinking...", busy=True)) == "⏳ AI is thinking..."
    assert render_text(SessionState(message="current player: X")) == "current player: X"


def _callbacks(markup):
    return [[button.callback_data for button in row] for row in markup.inline_keyboard]


def test_keyboard_cells_clickable_only_when_playable():
    board = make_board(["X..", "...", "..."], current="O")
    state = SessionState(board=board, message="current player: O", phase=Phase.READY)
    rows = _callbacks(get_keyboard(state, Difficulty.MEDIUM))
    assert rows[0] == ["noop", "cell_0_1", "cell_0_2"]
    assert rows[3] == ["new_game"]
    assert rows[4] == ["difficulty_easy", "difficulty_medium", "difficulty_hard"]

    busy = SessionState(board=board, busy=True, phase=Phase.AWAITING_AI)
    rows = _callbacks(get_keyboard(busy, Difficulty.MEDIUM))
    assert all(data == "noop" for row in rows[:3] for data in row)


def test_keyboard_highlights_winning_line_and_difficulty():
    board = make_board(["XX.", "OOO", "X.."], current="O", status="O")
    state = SessionState(board=board, highlighted_line=((1, 0), (1, 1), (1, 2)), phase=Phase.TERMINAL)
    symbols = {"X": "x", "O": "o", "X_win": "X!", "O_win": "O!", "empty": "_"}
    markup = get_keyboard(state, Difficulty.HARD, symbols)
    texts = [[button.text for button in row] for row in markup.inline_keyboard]
    assert texts[0] == ["x", "x", "_"]
    assert texts[1] == ["O!", "O!", "O!"]
    assert texts[4][2].startswith("✅")
    assert not texts[4][0].startswith("✅")
