"""Visibility cone geometry.

An agent sees straight ahead along its facing axis. At forward distance ``f``
(``1 <= f < depth``) it also sees up to ``f`` cells to either side, giving a
cone that widens by one cell per step. Cells beside or behind the agent are
never visible.
"""

from collections.abc import Iterable

from app.schemas.game_engine import Agent, Direction, Position

DEFAULT_VISION_DEPTH = 4


def _forward_and_lateral(
    position: Position, direction: Direction, target: Position
) -> tuple[int, int]:
    """Express ``target`` relative to an observer as (forward, lateral) offsets."""
    d_row = target[0] - position[0]
    d_col = target[1] - position[1]

    if direction is Direction.DOWN:
        return d_row, abs(d_col)
    if direction is Direction.UP:
        return -d_row, abs(d_col)
    if direction is Direction.RIGHT:
        return d_col, abs(d_row)
    return -d_col, abs(d_row)


def is_visible(
    position: Position,
    direction: Direction,
    target: Position,
    depth: int = DEFAULT_VISION_DEPTH,
) -> bool:
    """Check whether ``target`` lies in the cone of an observer.

    Args:
        position: Observer cell as (row, col).
        direction: Observer facing.
        target: Cell to test.
        depth: Exclusive bound on the forward distance.

    Returns:
        True if the target is strictly ahead, closer than ``depth``, and its
        lateral offset does not exceed its forward distance.
    """
    forward, lateral = _forward_and_lateral(position, direction, target)
    return 1 <= forward < depth and lateral <= forward


def agent_sees(agent: Agent, target: Position, depth: int = DEFAULT_VISION_DEPTH) -> bool:
    return is_visible(agent.position, agent.direction, target, depth)


def visible_opponents(
    observers: Iterable[Agent],
    opponents: Iterable[Agent],
    depth: int = DEFAULT_VISION_DEPTH,
) -> list[Position]:
    """Positions of opponents seen by at least one observer.

    Ordered by opponent roster slot, without duplicates.
    """
    observers = list(observers)
    seen: list[Position] = []
    for opponent in opponents:
        if opponent.position in seen:
            continue
        if any(agent_sees(observer, opponent.position, depth) for observer in observers):
            seen.append(opponent.position)
    return seen
