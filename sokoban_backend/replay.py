"""**********************************************************************************
 * Title: replay.py
 *
 * @version 1.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * This module rebuilds a history from a string of move codes so a player can
 * resume a level part way through a solution. Codes are applied in order
 * with the plain append rule (no implicit undo/redo folding). Characters
 * outside the move alphabet are skipped. Replay stops at the first move the
 * engine rejects, keeping everything applied up to that point.
 **********************************************************************************"""

# --- IMPORTS ---
import logging
from collections import namedtuple

from sokoban_backend.history_manager import HistoryManager
from sokoban_backend.move_engine import apply_move, direction_from_code


class ReplayResult(namedtuple('ReplayResult', ['history', 'applied', 'total', 'skipped', 'failed_at'])):
    """
    Outcome of a replay.

    'applied' of 'total' recognized codes were applied; 'skipped' counts the
    unrecognized characters; 'failed_at' is the position in the code string
    of the rejected move, or None if every recognized code was applied.
    """
    __slots__ = ()

    @property
    def complete(self):
        return self.failed_at is None


def replay(initial_state, move_codes):
    """
    Applies a sequence of move codes to a fresh history.

    :param LevelState initial_state: The parsed starting level.
    :param str move_codes: Codes from the alphabet 'udlrUDLR'; other characters are ignored.
    :returns: The rebuilt history and how many codes were applied.
    :rtype: ReplayResult
    """
    history = HistoryManager(initial_state)
    state = history.current_state()
    move_codes = move_codes or ''
    deltas = [(i, direction_from_code(ch)) for i, ch in enumerate(move_codes)]
    recognized = [(i, delta) for i, delta in deltas if delta is not None]
    skipped = len(deltas) - len(recognized)

    applied = 0
    failed_at = None
    for i, (delta_row, delta_col) in recognized:
        outcome = apply_move(state, delta_row, delta_col)
        if not outcome.ok:
            failed_at = i
            logging.error(
                f"Error while applying initial moves: invalid move at index {i} ({outcome.rejection})"
            )
            break
        history.append_move(outcome.state, outcome.move)
        state = outcome.state
        applied += 1

    if skipped:
        logging.info(f"Skipped {skipped} unrecognized move codes during replay.")
    return ReplayResult(history, applied, len(recognized), skipped, failed_at)
