"""Board builders and a scripted Game Service for tests."""
import asyncio

from game_service import GameService
from game_state import parse_board

SYMBOLS = {"X": "X", "O": "O", ".": "Empty"}


def payload(rows, current="X", status="InProgress"):
    """rows: три строки вида "XO." ; status: "InProgress", "Draw" или "X"/"O" для победы"""
    if status in ("X", "O"):
        status = {"Winner": status}
    return {
        "cells": [[SYMBOLS[ch] for ch in row] for row in rows],
        "current_player": current,
        "status": status,
    }


def make_board(rows, current="X", status="InProgress"):
    return parse_board(payload(rows, current, status))


class FakeGameService(GameService):
    """Returns queued boards (or raises queued errors) and records every call."""

    def __init__(self, fetch=None, new_game=None, moves=(), ai_moves=()):
        self.fetch = fetch if fetch is not None else make_board(["...", "...", "..."])
        self.new_game = new_game if new_game is not None else make_board(["...", "...", "..."])
        self.moves = list(moves)
        self.ai_moves = list(ai_moves)
        self.calls = []
        self.gate = None

    async def _answer(self, result):
        if self.gate is not None:
            await self.gate.wait()
        if isinstance(result, Exception):
            raise result
        return result

    async def fetch_state(self):
        self.calls.append(("fetch_state",))
        return await self._answer(self.fetch)

    async def start_new_game(self):
        self.calls.append(("start_new_game",))
        return await self._answer(self.new_game)

    async def submit_move(self, row, col):
        self.calls.append(("submit_move", row, col))
        return await self._answer(self.moves.pop(0))

    async def request_ai_move(self, difficulty):
        self.calls.append(("request_ai_move", difficulty))
        return await self._answer(self.ai_moves.pop(0))

    def count(self, name):
        return sum(1 for call in self.calls if call[0] == name)

    def hold(self):
        """Следующие ответы ждут release()"""
        self.gate = asyncio.Event()

    def release(self):
        self.gate.set()
