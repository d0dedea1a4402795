"""
Клиент игрового сервера. Сервер хранит партию, проверяет ходы и считает ход ИИ;
бот только отправляет запросы и проверяет присланную доску.
"""
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from config import GAME_SERVICE_URL, REQUEST_TIMEOUT, logger
from errors import AIMoveError, InvalidMoveError, MalformedStateError, TransportError
from game_state import Board, Difficulty, parse_board


class GameService(ABC):
    """Возможности игрового сервера, которые нужны оркестратору"""

    @abstractmethod
    async def fetch_state(self) -> Board:
        """Текущая партия"""

    @abstractmethod
    async def start_new_game(self) -> Board:
        """Новая партия: пустое поле, ходит X"""

    @abstractmethod
    async def submit_move(self, row: int, col: int) -> Board:
        """Ход текущего игрока. InvalidMoveError, если сервер его отклонил."""

    @abstractmethod
    async def request_ai_move(self, difficulty: Difficulty) -> Board:
        """Ход ИИ за текущего игрока. AIMoveError при неудаче."""

    async def aclose(self) -> None:
        pass


class HttpGameService(GameService):
    """GameService поверх HTTP API сервера (/api/game...)"""

    def __init__(self, base_url: str = GAME_SERVICE_URL, timeout: float = REQUEST_TIMEOUT,
                 client: Optional[httpx.AsyncClient] = None):
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)

    async def fetch_state(self) -> Board:
        return await self._request("GET", "/api/game")

    async def start_new_game(self) -> Board:
        return await self._request("POST", "/api/game")

    async def submit_move(self, row: int, col: int) -> Board:
        return await self._request(
            "POST", "/api/game/move",
            json={"row": row, "col": col},
            rejected=InvalidMoveError,
        )

    async def request_ai_move(self, difficulty: Difficulty) -> Board:
        return await self._request(
            "POST", f"/api/game/ai-move/{difficulty.value}",
            rejected=AIMoveError,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, json: Optional[dict] = None,
                       rejected: Optional[type] = None) -> Board:
        try:
            response = await self._client.request(method, path, json=json)
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {path} failed: {e}") from e

        if response.status_code >= 400:
            # Сервер отвечает 400, когда ход или ход ИИ невозможен
            if rejected is not None and response.status_code < 500:
                raise rejected(f"{method} {path} rejected with {response.status_code}")
            if rejected is AIMoveError:
                raise AIMoveError(f"{method} {path} failed with {response.status_code}")
            raise TransportError(f"{method} {path} returned {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedStateError(f"{method} {path} returned non-JSON body") from e
        if not isinstance(data, dict) or "board" not in data:
            raise MalformedStateError(f"{method} {path} response has no board")

        board = parse_board(data["board"])
        logger.debug(f"{method} {path} -> status={board.status}, server message: {data.get('message')!r}")
        return board
