import logging

from fastapi import APIRouter, WebSocket

from app.config import get_settings
from app.schemas.ws import WSCloseCode
from app.services.game.session import MatchSession
from app.services.lobby import get_lobby
from app.services.websocket.connection import ConnectionClosed, WebSocketConnection

logger = logging.getLogger(__name__)

router = APIRouter(tags=["websocket"])


async def _accept(websocket: WebSocket) -> WebSocketConnection:
    await websocket.accept()
    settings = get_settings()
    connection = WebSocketConnection(
        websocket=websocket,
        max_message_size=settings.WS_MAX_MESSAGE_SIZE,
    )
    logger.info("WS connection %s accepted", connection.connection_id)
    return connection


@router.websocket("/game")
async def new_game(websocket: WebSocket):
    """Create a game and wait for an opponent.

    Clients connect with: ws://host/game

    The server replies with the game code. The connection then stays idle until
    a second player joins with that code (the match is played over this socket)
    or the code expires and the socket is closed.
    """
    connection = await _accept(websocket)
    lobby = get_lobby()

    try:
        await lobby.create(connection)
    except ConnectionClosed as e:
        logger.info("Game creation abandoned: %s", e)
        return

    # The match session or the lobby expiry closes the connection.
    await connection.wait_closed()


@router.websocket("/game/{code}")
async def join_game(websocket: WebSocket, code: str):
    """Join the game waiting on ``code`` and play it.

    Clients connect with: ws://host/game/<code>

    Replies NoSuchGame and closes when the code is unknown; otherwise replies
    JoinedGame and runs the match on this task.
    """
    connection = await _accept(websocket)
    lobby = get_lobby()

    try:
        result = await lobby.join(code, connection)
    except ConnectionClosed as e:
        logger.info("Join of game %s abandoned: %s", code, e)
        return

    if not result.success or result.connections is None:
        await connection.close(WSCloseCode.NORMAL)
        return

    settings = get_settings()
    try:
        session = MatchSession(
            result.connections,
            match_settings=settings.match_settings(),
            turn_timeout=settings.TURN_TIMEOUT_SECONDS,
            notify_opponent_on_abandon=settings.NOTIFY_OPPONENT_ON_ABANDON,
        )
        await session.run()
    except Exception:
        logger.exception("Match for game %s crashed", code)
        for player in result.connections:
            await player.close(WSCloseCode.INTERNAL_ERROR)
