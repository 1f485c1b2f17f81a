"""Match session: runs one match between two paired connections.

The session owns both connections for the lifetime of the match. It waits for
exactly one message at a time, from the side whose turn it is, so the match
state is never touched concurrently.
"""

import asyncio
import logging
import random

from app.schemas.game_engine import MatchPhase, MatchSettings, MatchState, Side
from app.schemas.ws import InvalidMove, OpponentLeft, Start, WSCloseCode
from app.schemas.ws import MovePlayed as MovePlayedMessage
from app.services.websocket.connection import ConnectionClosed, PlayerConnection

from .engine import InvalidSubmission, decode_submission, process_turn
from .start_game import initialize_match

logger = logging.getLogger(__name__)


class MatchSession:
    """Drive the alternating-turn loop for one match.

    Args:
        connections: The two paired connections, in any order. They are
            shuffled to decide who moves first.
        match_settings: Board and roster layout; defaults to the reference sizing.
        rng: Random source for the seat draw and the board.
        turn_timeout: Seconds the current side may take to submit. None waits
            forever.
        notify_opponent_on_abandon: Send OpponentLeft to the remaining side
            when the match ends because the other side failed.
    """

    def __init__(
        self,
        connections: tuple[PlayerConnection, PlayerConnection],
        match_settings: MatchSettings | None = None,
        rng: random.Random | None = None,
        turn_timeout: float | None = None,
        notify_opponent_on_abandon: bool = False,
    ):
        self._rng = rng or random.Random()
        seats = list(connections)
        self._rng.shuffle(seats)
        self._connections: tuple[PlayerConnection, PlayerConnection] = (seats[0], seats[1])
        self._turn_timeout = turn_timeout
        self._notify_opponent_on_abandon = notify_opponent_on_abandon

        self.state: MatchState = initialize_match(match_settings or MatchSettings(), self._rng)
        self.termination_reason: str | None = None

    def connection(self, side: Side) -> PlayerConnection:
        return self._connections[side]

    def _side_of(self, connection_id: str) -> Side | None:
        for side in Side:
            if self._connections[side].connection_id == connection_id:
                return side
        return None

    async def run(self) -> MatchState:
        """Play the match until a connection fails.

        Returns:
            The final, terminated match state.
        """
        logger.info(
            "Match started: first=%s, second=%s",
            self._connections[Side.FIRST].connection_id,
            self._connections[Side.SECOND].connection_id,
        )
        try:
            await self._send_start()
            while True:
                await self._play_turn()
        except ConnectionClosed as e:
            await self._terminate(str(e), failed_side=self._side_of(e.connection_id))
        except asyncio.TimeoutError:
            stalled = self.state.current_side
            await self._terminate(f"side {stalled.name} timed out", failed_side=stalled)
        finally:
            for connection in self._connections:
                await connection.close(WSCloseCode.NORMAL)
        return self.state

    async def _send_start(self) -> None:
        for side in Side:
            await self.connection(side).send_message(
                Start(board=self.state.board, is_first_player=side is Side.FIRST)
            )

    async def _receive(self, connection: PlayerConnection) -> str | None:
        # Cancellable suspension; no timeout unless one is configured.
        return await asyncio.wait_for(connection.receive_text(), timeout=self._turn_timeout)

    async def _play_turn(self) -> None:
        side = self.state.current_side
        connection = self.connection(side)
        raw_text = await self._receive(connection)

        try:
            moves = decode_submission(raw_text)
        except InvalidSubmission as e:
            logger.warning("Undecodable submission from side %s: %s", side.name, e)
            await connection.send_message(InvalidMove())
            return

        result = process_turn(self.state, side, moves)
        if not result.success or result.state is None:
            await connection.send_message(InvalidMove())
            return

        self.state = result.state
        for event in result.events:
            await self.connection(event.recipient).send_message(
                MovePlayedMessage(visible_opponents=event.visible_opponents)
            )

    async def _terminate(self, reason: str, failed_side: Side | None) -> None:
        self.termination_reason = reason
        self.state = self.state.model_copy(update={"phase": MatchPhase.TERMINATED})
        logger.info(
            "Match terminated after %d turns: %s",
            self.state.turn_number,
            reason,
        )

        if not self._notify_opponent_on_abandon or failed_side is None:
            return
        try:
            await self.connection(failed_side.opponent).send_message(OpponentLeft())
        except ConnectionClosed:
            logger.debug("Remaining side %s already gone", failed_side.opponent.name)
