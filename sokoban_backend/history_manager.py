"""**********************************************************************************
 * Title: history_manager.py
 *
 * @version 1.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * This file defines the HistoryManager class, which keeps the linear move
 * history of a play session. Unlike a differential history, every entry
 * stores a full snapshot of the level, so undo, redo and multi-step seeks
 * only move a pointer. A freshly played move that lands exactly on the
 * previous or next recorded state is folded into an undo or redo instead of
 * starting a new branch; any other move discards the redo tail before it is
 * appended. The history can be serialized into a compact move string and
 * rebuilt from one by replaying it against the initial level.
 **********************************************************************************"""

# --- IMPORTS ---
import logging
from collections import namedtuple

from sokoban_backend.constants import (
    RECORD_APPEND, RECORD_UNDO, RECORD_REDO, TRAIL_INDEX_MARKER, HISTORY_PREFIX
)

HistoryEntry = namedtuple('HistoryEntry', ['last_move', 'snapshot'])


# --- CLASS DEFINITION ---
class HistoryManager:
    """Manages the snapshot history of a session for undo/redo and seeking."""
    def __init__(self, initial_state):
        """
        Seeds the history with a single entry holding the initial state.

        :param LevelState initial_state: The parsed starting level.
        """
        self.entries = [HistoryEntry(None, initial_state.copy())]
        self.index = 0

    def __len__(self):
        return len(self.entries)

    # --- RECORDING ---
    def record_move(self, state, move):
        """
        Folds a validated move into the history.

        If the resulting state equals the next recorded snapshot the move is
        treated as a redo; if it equals the previous snapshot, as an undo.
        Otherwise the redo tail is discarded and the move is appended.

        :param LevelState state: The state produced by the move engine.
        :param MoveDescriptor move: The move that produced it.
        :returns: One of RECORD_REDO, RECORD_UNDO or RECORD_APPEND.
        :rtype: str
        """
        if (self.index + 1 < len(self.entries)
                and state.same_position_as(self.entries[self.index + 1].snapshot)):
            self.index += 1
            return RECORD_REDO
        if self.index > 0 and state.same_position_as(self.entries[self.index - 1].snapshot):
            self.index -= 1
            return RECORD_UNDO
        self.append_move(state, move)
        return RECORD_APPEND

    def append_move(self, state, move):
        """
        Appends a move unconditionally, truncating any redo tail first.

        :param LevelState state: The state produced by the move engine.
        :param MoveDescriptor move: The move that produced it.
        """
        del self.entries[self.index + 1:]
        self.entries.append(HistoryEntry(move, state.copy()))
        self.index = len(self.entries) - 1

    # --- NAVIGATION ---
    def seek(self, direction, stop_at_move, stop_at_push):
        """
        Walks the pointer in one direction until a stop condition holds.

        With stop_at_move the walk stops after one step; with stop_at_push it
        stops on the first entry whose move was a push; with neither it runs
        to the boundary.

        :param int direction: -1 to go back, +1 to go forward.
        :param bool stop_at_move: Stop after a single step.
        :param bool stop_at_push: Stop on an entry reached by a push.
        :returns: False if the pointer was already at the boundary.
        :rtype: bool
        """
        if direction not in (-1, 1):
            raise ValueError(f"Seek direction must be -1 or +1, got {direction!r}")
        i = self.index
        while 0 <= i + direction < len(self.entries):
            i += direction
            last_move = self.entries[i].last_move
            if stop_at_move or (stop_at_push and last_move is not None and last_move.is_push):
                break
        if i == self.index:
            return False
        self.index = i
        return True

    def jump_to(self, index):
        """
        Moves the pointer directly to an entry.

        :param int index: The target entry.
        :returns: False, leaving the pointer unchanged, if index is out of range.
        :rtype: bool
        """
        if not 0 <= index < len(self.entries):
            logging.warning(f"History index {index} out of range [0, {len(self.entries)})")
            return False
        self.index = index
        return True

    def undo(self):
        """Moves the history pointer back one step if possible."""
        return self.seek(-1, True, True)

    def redo(self):
        """Moves the history pointer forward one step if possible."""
        return self.seek(1, True, True)

    def can_undo(self):
        return self.index > 0

    def can_redo(self):
        return self.index + 1 < len(self.entries)

    def reset(self, initial_state):
        """
        Drops every recorded move and starts over from a new initial state.

        :param LevelState initial_state: The new starting level.
        """
        self.entries, self.index = [HistoryEntry(None, initial_state.copy())], 0

    # --- ACCESSORS ---
    def current_entry(self):
        return self.entries[self.index]

    def current_state(self):
        """
        Returns a copy of the snapshot at the current pointer.

        :rtype: LevelState
        """
        return self.entries[self.index].snapshot.copy()

    def initial_state(self):
        return self.entries[0].snapshot.copy()

    def move_codes(self):
        """
        Returns the codes of every recorded move, ignoring the pointer.

        :rtype: str
        """
        return ''.join(entry.last_move.code for entry in self.entries[1:])

    def move_trail(self):
        """
        Returns the move trail for display, with ':' after the current entry.

        :rtype: str
        """
        trail = []
        for i, entry in enumerate(self.entries):
            if entry.last_move is not None:
                trail.append(entry.last_move.code)
            if i == self.index:
                trail.append(TRAIL_INDEX_MARKER)
        return ''.join(trail)

    # --- SERIALIZATION ---
    def serialize(self):
        """
        Serializes the history into 'h:<move codes>:<index>'.

        :returns: The serialized string, or an empty string if no moves exist.
        :rtype: str
        """
        if len(self.entries) == 1:
            return ""
        return f"{HISTORY_PREFIX}:{self.move_codes()}:{self.index}"

    @classmethod
    def deserialize(cls, initial_state, history_string):
        """
        Rebuilds a history by replaying a serialized move string.

        Returns a fresh manager if the string is malformed. If the replay
        stops early, the pointer is clamped to the last rebuilt entry.

        :param LevelState initial_state: The starting level the moves apply to.
        :param str history_string: The string produced by serialize().
        :rtype: HistoryManager
        """
        return cls.replay_serialized(initial_state, history_string).history

    @staticmethod
    def replay_serialized(initial_state, history_string):
        """
        Same as deserialize(), but returns the full ReplayResult so callers
        can report how many of the stored moves were applied.

        :param LevelState initial_state: The starting level the moves apply to.
        :param str history_string: The string produced by serialize().
        :rtype: ReplayResult
        """
        from sokoban_backend.replay import replay

        codes, index = '', 0
        if history_string:
            try:
                prefix, codes, index_data = history_string.split(':')
                if prefix != HISTORY_PREFIX:
                    raise ValueError(f"Unknown history prefix {prefix!r}")
                index = int(index_data)
            except ValueError as e:
                logging.warning(f"Error deserializing history: {e}")
                codes, index = '', 0

        result = replay(initial_state, codes)
        result.history.jump_to(min(max(index, 0), len(result.history.entries) - 1))
        return result
