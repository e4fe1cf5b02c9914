"""**********************************************************************************
 * Title: move_engine.py
 *
 * @version 1.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * This module decides whether a player move is legal and produces the next
 * state. A move is blocked by a wall, or by a box that cannot be pushed
 * because a wall or another box sits behind it. Every check runs before
 * anything is copied, so a rejected move never touches the given state; a
 * legal move returns a fresh state plus the MoveDescriptor that the history
 * records alongside it.
 **********************************************************************************"""

# --- IMPORTS ---
from collections import namedtuple

from sokoban_backend.level_state import MoveDescriptor
from sokoban_backend.constants import (
    DIRECTIONS, MOVE_CODE_TO_DELTA, REJECT_BLOCKED, REJECT_PUSH_BLOCKED
)

VALID_DELTAS = frozenset(DIRECTIONS.values())


class MoveOutcome(namedtuple('MoveOutcome', ['state', 'move', 'rejection'])):
    """Result of a move attempt. 'rejection' is None when the move succeeded."""
    __slots__ = ()

    @property
    def ok(self):
        return self.rejection is None


def direction_from_code(code):
    """
    Maps one character of the move-code alphabet to its delta.

    :param str code: A single character such as 'u' or 'R'.
    :returns: (delta_row, delta_col), or None if the code is not recognized.
    :rtype: tuple[int, int] | None
    """
    return MOVE_CODE_TO_DELTA.get(code)


def apply_move(state, delta_row, delta_col):
    """
    Attempts to move the player one cell in the given direction.

    :param LevelState state: The current state. It is never modified.
    :param int delta_row: Row offset, one of -1, 0, 1.
    :param int delta_col: Column offset, one of -1, 0, 1.
    :returns: The outcome with the new state and move, or the rejection reason.
    :rtype: MoveOutcome
    :raises ValueError: If the delta is not one of the four axis directions.
    """
    if (delta_row, delta_col) not in VALID_DELTAS:
        raise ValueError(f"Invalid move direction: ({delta_row}, {delta_col})")

    r1, c1 = state.player_row + delta_row, state.player_col + delta_col
    if state.is_wall(r1, c1):
        return MoveOutcome(None, None, REJECT_BLOCKED)

    push = state.has_box(r1, c1)
    r2, c2 = r1 + delta_row, c1 + delta_col
    if push and (state.is_wall(r2, c2) or state.has_box(r2, c2)):
        return MoveOutcome(None, None, REJECT_PUSH_BLOCKED)

    new_state = state.copy()
    if push:
        new_state.boxes[r1][c1] = False
        new_state.boxes[r2][c2] = True
    new_state.player_row, new_state.player_col = r1, c1
    return MoveOutcome(new_state, MoveDescriptor(delta_row, delta_col, push), None)


def apply_direction(state, direction):
    """
    Convenience wrapper taking a direction name ('up', 'down', 'left', 'right').

    :raises ValueError: If the name is unknown.
    """
    try:
        delta_row, delta_col = DIRECTIONS[direction]
    except KeyError:
        raise ValueError(f"Unknown direction: {direction!r}") from None
    return apply_move(state, delta_row, delta_col)
