"""**********************************************************************************
 * Title: level_state.py
 *
 * @version 1.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * This file defines the LevelState class, the mutable grid state of a single
 * Sokoban level, together with the MoveDescriptor record attached to every
 * history entry. Walls and goals are fixed once a level has been parsed;
 * only the player position and the box grid change from one state to the
 * next. Two states are considered equal when their boxes and player
 * position match, which is what the history uses to recognize a move that
 * retraces an already recorded step.
 **********************************************************************************"""

# --- IMPORTS ---
from collections import namedtuple

from sokoban_backend.constants import DELTA_TO_MOVE_CODE, UNKNOWN_MOVE_CODE


# --- MOVE DESCRIPTOR ---
class MoveDescriptor(namedtuple('MoveDescriptor', ['delta_row', 'delta_col', 'is_push'])):
    """A single applied move: its direction and whether it displaced a box."""
    __slots__ = ()

    @property
    def code(self):
        """
        Returns the trail symbol for this move.

        Walks are lowercase ('u', 'd', 'l', 'r') and pushes uppercase.

        :returns: The one-character move code.
        :rtype: str
        """
        char = DELTA_TO_MOVE_CODE.get((self.delta_row, self.delta_col), UNKNOWN_MOVE_CODE)
        return char.upper() if self.is_push else char

    def to_dict(self):
        return {'dr': self.delta_row, 'dc': self.delta_col, 'push': self.is_push}


# --- LEVEL STATE ---
class LevelState:
    """The grid state of a level: walls, goals, boxes and the player position."""
    def __init__(self, height, width, player_row, player_col, walls, goals, boxes):
        """
        Initializes the state from already validated grids.

        :param int height: Number of rows in the level.
        :param int width: Number of columns in the level.
        :param int player_row: Row of the player.
        :param int player_col: Column of the player.
        :param list[list[bool]] walls: Wall flags, height x width.
        :param list[list[bool]] goals: Goal flags, height x width.
        :param list[list[bool]] boxes: Box flags, height x width.
        """
        self.height = height
        self.width = width
        self.player_row = player_row
        self.player_col = player_col
        self.walls = walls
        self.goals = goals
        self.boxes = boxes

    def copy(self):
        """
        Returns an independent copy of this state.

        Walls and goals are never mutated after parsing, so they are shared;
        the box grid is copied row by row.

        :returns: A new LevelState.
        :rtype: LevelState
        """
        return LevelState(
            self.height, self.width, self.player_row, self.player_col,
            self.walls, self.goals, [list(row) for row in self.boxes],
        )

    def in_bounds(self, r, c):
        return 0 <= r < self.height and 0 <= c < self.width

    def is_wall(self, r, c):
        """Cells outside the grid behave as walls."""
        return not self.in_bounds(r, c) or self.walls[r][c]

    def has_box(self, r, c):
        return self.in_bounds(r, c) and self.boxes[r][c]

    def is_goal(self, r, c):
        return self.in_bounds(r, c) and self.goals[r][c]

    def same_position_as(self, other):
        """
        Compares the mutable part of two states of the same level.

        :param LevelState other: The state to compare against.
        :returns: True if the player position and every box match.
        :rtype: bool
        """
        return (self.player_row == other.player_row
                and self.player_col == other.player_col
                and self.boxes == other.boxes)

    def __eq__(self, other):
        if not isinstance(other, LevelState):
            return NotImplemented
        return (self.height == other.height and self.width == other.width
                and self.walls == other.walls and self.goals == other.goals
                and self.same_position_as(other))

    __hash__ = None

    def box_count(self):
        return sum(row.count(True) for row in self.boxes)

    def goal_count(self):
        return sum(row.count(True) for row in self.goals)

    def is_solved(self):
        """
        Checks whether every goal cell holds a box.

        The move engine never calls this; consumers check it after a move.

        :returns: True if the level is solved.
        :rtype: bool
        """
        return all(
            self.boxes[r][c]
            for r in range(self.height) for c in range(self.width)
            if self.goals[r][c]
        )

    def to_dict(self):
        """Returns the JSON-friendly form used by the API."""
        return {
            'height': self.height,
            'width': self.width,
            'playerR': self.player_row,
            'playerC': self.player_col,
            'walls': self.walls,
            'goals': self.goals,
            'boxes': self.boxes,
        }

    def __repr__(self):
        return (f"LevelState({self.height}x{self.width}, "
                f"player=({self.player_row}, {self.player_col}), boxes={self.box_count()})")
