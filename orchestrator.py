"""
Оркестратор партии: решает, когда можно отправить ход, когда звать ИИ,
и собирает новый снимок сессии из ответов игрового сервера.
"""
import asyncio
from dataclasses import replace
from typing import Awaitable, Callable, List

from config import AI_THINKING_DELAY, logger
from errors import GameClientError, MalformedStateError
from game_logic import find_winning_line, status_message
from game_service import GameService
from game_state import Board, Difficulty, Phase, SessionState, is_cell_playable

Listener = Callable[[SessionState], Awaitable[None]]

LOADING_MESSAGE = "Loading game..."
STARTING_MESSAGE = "Starting new game..."
AI_THINKING_MESSAGE = "AI is thinking..."
FETCH_ERROR_MESSAGE = "Error fetching game state. Please try again."
NEW_GAME_ERROR_MESSAGE = "Error starting game. Please try again."
MOVE_ERROR_MESSAGE = "Error making move. Please try again."
AI_ERROR_MESSAGE = "AI move failed. Your turn."
MALFORMED_MESSAGE = "Received an invalid game state. Please try again."
UNEXPECTED_ERROR_MESSAGE = "Something went wrong. Please try again."


class GameOrchestrator:
    """Конечный автомат одной сессии.

    Владеет снимком SessionState и заменяет его целиком на каждом переходе.
    Одновременно выполняется не больше одного запроса к серверу: пока
    busy=True, новые ходы и новая игра отбрасываются.
    """

    def __init__(self, service: GameService, ai_delay: float = AI_THINKING_DELAY):
        self.service = service
        self.ai_delay = ai_delay
        self._state = SessionState(message=LOADING_MESSAGE)
        self._listeners: List[Listener] = []

    @property
    def state(self) -> SessionState:
        return self._state

    def subscribe(self, listener: Listener) -> None:
        """Добавляет слушателя, которого вызывают после каждого перехода"""
        self._listeners.append(listener)

    async def start(self) -> None:
        """Загружает текущую партию с сервера (продолжение игры)"""
        if self._state.phase is not Phase.IDLE or self._state.busy:
            logger.debug("start() ignored: session already started")
            return
        await self._set(busy=True)
        try:
            board = await self.service.fetch_state()
        except GameClientError as e:
            logger.warning(f"Failed to fetch game state: {e}")
            await self._set(board=Board.new(), busy=False, highlighted_line=None,
                            message=_error_message(e, FETCH_ERROR_MESSAGE), phase=Phase.READY)
            return
        except Exception:
            await self._recover(UNEXPECTED_ERROR_MESSAGE)
            raise
        await self._settle(board)

    async def new_game(self) -> bool:
        """Просит сервер начать новую партию. False, если сессия занята."""
        if self._state.busy:
            logger.debug("new_game() dropped: request in flight")
            return False
        await self._set(busy=True, message=STARTING_MESSAGE)
        try:
            board = await self.service.start_new_game()
        except GameClientError as e:
            logger.warning(f"Failed to start new game: {e}")
            await self._recover(_error_message(e, NEW_GAME_ERROR_MESSAGE))
            return True
        except Exception:
            await self._recover(UNEXPECTED_ERROR_MESSAGE)
            raise
        logger.info("New game started")
        await self._settle(board)
        return True

    async def attempt_move(self, row: int, col: int, difficulty: Difficulty) -> bool:
        """Ход игрока и, если партия продолжается, ответ ИИ.

        Недопустимый ход (занятая клетка, партия окончена, идёт запрос)
        отбрасывается без обращения к серверу.

        Args:
            row: строка 0..2.
            col: столбец 0..2.
            difficulty: сложность для хода ИИ, фиксируется в момент запроса.
        Returns:
            True, если ход принят в обработку.
        """
        state = self._state
        if state.busy or not is_cell_playable(state.board, row, col):
            logger.debug(f"Move ({row}, {col}) rejected locally: busy={state.busy}, status={state.board.status}")
            return False

        await self._set(busy=True, phase=Phase.SUBMITTING_MOVE)
        try:
            board = await self.service.submit_move(row, col)
        except GameClientError as e:
            logger.warning(f"Move ({row}, {col}) failed: {e}")
            await self._recover(_error_message(e, MOVE_ERROR_MESSAGE))
            return True
        except Exception:
            await self._recover(UNEXPECTED_ERROR_MESSAGE)
            raise

        if board.status.is_terminal:
            await self._settle(board)
            return True

        # Ход принят и партия продолжается: только теперь зовём ИИ
        await self._set(board=board, highlighted_line=None, message=AI_THINKING_MESSAGE, phase=Phase.AWAITING_AI)
        await self._ai_turn(difficulty)
        return True

    async def _ai_turn(self, difficulty: Difficulty) -> None:
        if self.ai_delay > 0:
            await asyncio.sleep(self.ai_delay)
        try:
            board = await self.service.request_ai_move(difficulty)
        except GameClientError as e:
            logger.warning(f"AI move ({difficulty.value}) failed: {e}")
            await self._recover(_error_message(e, AI_ERROR_MESSAGE))
            return
        except Exception:
            await self._recover(UNEXPECTED_ERROR_MESSAGE)
            raise
        await self._settle(board)

    async def _settle(self, board: Board) -> None:
        """Принимает доску с сервера и снимает busy"""
        phase = Phase.TERMINAL if board.status.is_terminal else Phase.READY
        await self._set(
            board=board,
            busy=False,
            message=status_message(board),
            highlighted_line=find_winning_line(board),
            phase=phase,
        )
        if phase is Phase.TERMINAL:
            logger.info(f"Game over: {board.status}")

    async def _recover(self, message: str) -> None:
        """После ошибки: доска остаётся последней корректной"""
        # busy снимается при любой ошибке
        board = self._state.board
        phase = Phase.TERMINAL if board.status.is_terminal else Phase.READY
        await self._set(busy=False, message=message, phase=phase)

    async def _set(self, **changes) -> None:
        self._state = replace(self._state, **changes)
        snapshot = self._state
        for listener in list(self._listeners):
            try:
                await listener(snapshot)
            except Exception as e:
                logger.error(f"Session listener failed: {e}", exc_info=True)


def _error_message(error: GameClientError, default: str) -> str:
    if isinstance(error, MalformedStateError):
        return MALFORMED_MESSAGE
    return default
