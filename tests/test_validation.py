"""Tests for batch validation.

Critical scenarios tested:
- Match phase and turn ownership
- Batch length
- Move targets: bounds, cone, blocks, duplicates, own-side occupancy
- Cross-side collisions are allowed unless enabled
- Any invalid entry rejects the whole batch
"""

from app.schemas.game_engine import Direction, MatchPhase, MatchState, Side, Square
from app.services.game.engine import (
    TurnLeft,
    TurnRight,
    process_turn,
    validate_turn,
)

from .conftest import agent, batch, make_state, move_to


class TestTurnValidation:
    """Test validation based on match phase and turn ownership."""

    def test_second_side_cannot_move_first(self, fresh_match: MatchState):
        result = process_turn(fresh_match, Side.SECOND, batch())

        assert not result.success
        assert result.error_code == "NOT_YOUR_TURN"

    def test_cannot_move_in_terminated_match(self, fresh_match: MatchState):
        state = fresh_match.model_copy(update={"phase": MatchPhase.TERMINATED})

        result = process_turn(state, Side.FIRST, batch())

        assert not result.success
        assert result.error_code == "MATCH_TERMINATED"

    def test_all_nothing_batch_is_valid(self, fresh_match: MatchState):
        assert validate_turn(fresh_match, Side.FIRST, batch()).is_valid


class TestBatchLength:
    """A batch must hold exactly one move per agent."""

    def test_short_batch_rejected(self, fresh_match: MatchState):
        result = process_turn(fresh_match, Side.FIRST, batch(size=9))

        assert not result.success
        assert result.error_code == "WRONG_BATCH_LENGTH"

    def test_long_batch_rejected(self, fresh_match: MatchState):
        result = process_turn(fresh_match, Side.FIRST, batch(size=11))

        assert not result.success
        assert result.error_code == "WRONG_BATCH_LENGTH"

    def test_empty_batch_rejected(self, fresh_match: MatchState):
        result = process_turn(fresh_match, Side.FIRST, [])

        assert result.error_code == "WRONG_BATCH_LENGTH"

    def test_short_batch_rejected_even_if_moves_are_valid(self, fresh_match: MatchState):
        moves = batch(size=9, slot_0=move_to(2, 6))

        result = process_turn(fresh_match, Side.FIRST, moves)

        assert result.error_code == "WRONG_BATCH_LENGTH"


class TestMoveTargets:
    """Test the geometric and board checks on MoveTo entries."""

    def test_target_outside_board_rejected(self, fresh_match: MatchState):
        result = process_turn(fresh_match, Side.FIRST, batch(slot_0=move_to(20, 6)))

        assert result.error_code == "TARGET_OUT_OF_BOUNDS"

    def test_target_outside_cone_rejected(self, fresh_match: MatchState):
        """(1, 6) facing Down cannot see the cell beside it."""
        result = process_turn(fresh_match, Side.FIRST, batch(slot_0=move_to(1, 7)))

        assert result.error_code == "TARGET_NOT_VISIBLE"

    def test_target_beyond_depth_rejected(self, fresh_match: MatchState):
        assert process_turn(fresh_match, Side.FIRST, batch(slot_0=move_to(4, 6))).success

        result = process_turn(fresh_match, Side.FIRST, batch(slot_0=move_to(5, 6)))

        assert result.error_code == "TARGET_NOT_VISIBLE"

    def test_target_on_block_rejected(self):
        board = [[Square.EMPTY] * 20 for _ in range(20)]
        board[2][6] = Square.BLOCK
        state = make_state([agent(1, 6, Direction.DOWN)], [agent(18, 6, Direction.UP)], board)

        result = process_turn(state, Side.FIRST, [move_to(2, 6)])

        assert not result.success
        assert result.error_code == "TARGET_BLOCKED"

    def test_two_agents_claiming_same_cell_rejected(self, fresh_match: MatchState):
        """(1, 6) and (1, 7) both see (2, 6)."""
        moves = batch(slot_0=move_to(2, 6), slot_1=move_to(2, 6))

        result = process_turn(fresh_match, Side.FIRST, moves)

        assert result.error_code == "DUPLICATE_TARGET"

    def test_distinct_targets_accepted(self, fresh_match: MatchState):
        moves = batch(slot_0=move_to(2, 6), slot_1=move_to(3, 7))

        assert process_turn(fresh_match, Side.FIRST, moves).success

    def test_cone_uses_position_before_the_batch(self):
        """A turn in the same batch does not widen the agent's cone."""
        state = make_state(
            [agent(5, 5, Direction.DOWN), agent(5, 9, Direction.DOWN)],
            [agent(18, 5, Direction.UP)],
        )

        result = process_turn(state, Side.FIRST, [TurnLeft(), move_to(5, 10)])

        assert result.error_code == "TARGET_NOT_VISIBLE"

    def test_one_bad_entry_rejects_whole_batch(self, fresh_match: MatchState):
        moves = batch(slot_0=move_to(2, 6), slot_1=TurnRight(), slot_9=move_to(1, 14))

        result = process_turn(fresh_match, Side.FIRST, moves)

        assert not result.success
        assert result.state is None
        assert fresh_match.roster(Side.FIRST)[0].position == (1, 6)
        assert fresh_match.roster(Side.FIRST)[1].direction == Direction.DOWN


class TestOccupancy:
    """Test occupancy rules for agents of both sides."""

    def test_cannot_move_onto_friendly_agent_that_stays(self):
        state = make_state(
            [agent(5, 5, Direction.DOWN), agent(6, 5, Direction.DOWN)],
            [agent(18, 5, Direction.UP)],
        )

        result = process_turn(state, Side.FIRST, [move_to(6, 5), TurnLeft()])

        assert result.error_code == "TARGET_OCCUPIED"

    def test_can_follow_friendly_agent_that_moves_away(self):
        state = make_state(
            [agent(5, 5, Direction.DOWN), agent(6, 5, Direction.DOWN)],
            [agent(18, 5, Direction.UP)],
        )

        result = process_turn(state, Side.FIRST, [move_to(6, 5), move_to(7, 5)])

        assert result.success
        positions = [a.position for a in result.state.roster(Side.FIRST)]
        assert positions == [(6, 5), (7, 5)]

    def test_can_move_onto_opponent_by_default(self):
        state = make_state([agent(5, 5, Direction.DOWN)], [agent(6, 5, Direction.UP)])

        result = process_turn(state, Side.FIRST, [move_to(6, 5)])

        assert result.success
        assert result.state.roster(Side.FIRST)[0].position == (6, 5)

    def test_opponent_collision_rejected_when_enabled(self):
        state = make_state(
            [agent(5, 5, Direction.DOWN)],
            [agent(6, 5, Direction.UP)],
            check_cross_side_collisions=True,
        )

        result = process_turn(state, Side.FIRST, [move_to(6, 5)])

        assert result.error_code == "TARGET_OCCUPIED_BY_OPPONENT"
