"""Tests for the HTTP Game Service client against a mocked transport."""
import asyncio
import json

import httpx
import pytest

from errors import AIMoveError, InvalidMoveError, MalformedStateError, TransportError
from game_service import HttpGameService
from game_state import Board, Cell, Difficulty, GameStatus
from boards import payload

BASE = "http://game.test"


def service_for(handler):
    client = httpx.AsyncClient(base_url=BASE, transport=httpx.MockTransport(handler))
    return HttpGameService(base_url=BASE, client=client)


def reply(board_payload, message="current player: X", status_code=200):
    return httpx.Response(status_code, json={"board": board_payload, "message": message})


def call(service, method, *args):
    async def go():
        try:
            return await getattr(service, method)(*args)
        finally:
            await service.aclose()
    return asyncio.run(go())


def test_fetch_state():
    requests = []

    def handler(request):
        requests.append(request)
        return reply(Board.new().to_payload())

    board = call(service_for(handler), "fetch_state")
    assert board == Board.new()
    assert requests[0].method == "GET"
    assert requests[0].url.path == "/api/game"


def test_start_new_game_posts():
    def handler(request):
        assert (request.method, request.url.path) == ("POST", "/api/game")
        return reply(Board.new().to_payload(), message="new game started. player X goes first.")

    assert call(service_for(handler), "start_new_game") == Board.new()


def test_submit_move_sends_coordinates():
    def handler(request):
        assert request.url.path == "/api/game/move"
        assert json.loads(request.content) == {"row": 1, "col": 2}
        return reply(payload(["...", "..X", "..."], current="O"), message="current player: O")

    board = call(service_for(handler), "submit_move", 1, 2)
    assert board.cells[1][2] is Cell.X
    assert board.current_player is Cell.O


def test_ai_move_uses_difficulty_in_path():
    def handler(request):
        assert request.url.path == "/api/game/ai-move/hard"
        return reply(payload(["XXX", "OO.", "..."], status="X"), message="player X wins!!!")

    board = call(service_for(handler), "request_ai_move", Difficulty.HARD)
    assert board.status == GameStatus.win(Cell.X)


def test_rejected_move_raises_invalid_move():
    service = service_for(lambda request: httpx.Response(400))
    with pytest.raises(InvalidMoveError):
        call(service, "submit_move", 0, 0)


def test_failed_ai_move_raises_ai_move_error():
    with pytest.raises(AIMoveError):
        call(service_for(lambda request: httpx.Response(400)), "request_ai_move", Difficulty.EASY)
    with pytest.raises(AIMoveError):
        call(service_for(lambda request: httpx.Response(500)), "request_ai_move", Difficulty.EASY)


def test_server_error_raises_transport_error():
    with pytest.raises(TransportError):
        call(service_for(lambda request: httpx.Response(500)), "submit_move", 0, 0)
    with pytest.raises(TransportError):
        call(service_for(lambda request: httpx.Response(503)), "fetch_state")


def test_connection_error_raises_transport_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransportError):
        call(service_for(handler), "fetch_state")


def test_bad_bodies_raise_malformed_state():
    with pytest.raises(MalformedStateError):
        call(service_for(lambda request: httpx.Response(200, text="<html>")), "fetch_state")
    with pytest.raises(MalformedStateError):
        call(service_for(lambda request: httpx.Response(200, json={"message": "hi"})), "fetch_state")
    bad_counts = payload(["XX.", "...", "..."], current="O")
    with pytest.raises(MalformedStateError):
        call(service_for(lambda request: reply(bad_counts)), "fetch_state")
