"""**********************************************************************************
 * Title: session.py
 *
 * @version 1.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * This module defines the PlaySession class, the single source of truth for
 * one level being played. It owns the history seeded from the parsed level
 * (and any initial moves), routes player moves through the move engine into
 * the history, exposes the six seek controls and produces the view consumed
 * by the API. The AutoPlayer class steps forward through the history on a
 * sched.scheduler, pausing longer before pushes, and can be cancelled at
 * any time.
 **********************************************************************************"""

# --- IMPORTS ---
import sched
import time
import logging

from sokoban_backend.level_parser import parse_level
from sokoban_backend.history_manager import HistoryManager
from sokoban_backend.move_engine import apply_move
from sokoban_backend.replay import replay
from sokoban_backend.constants import (
    DIRECTIONS, SEEK_TARGETS, AUTOPLAY_START_DELAY, AUTOPLAY_MOVE_DELAY, AUTOPLAY_PUSH_DELAY
)


# --- AUTO-PLAY ---
class AutoPlayer:
    """Steps forward through a history on a timer until the end is reached."""
    def __init__(self, history, scheduler=None, on_step=None):
        """
        :param HistoryManager history: The history to step through.
        :param sched.scheduler scheduler: Scheduler for ticks; defaults to a monotonic one.
        :param callable on_step: Called with the history after every step.
        """
        self.history = history
        self.scheduler = scheduler or sched.scheduler(time.monotonic, time.sleep)
        self.on_step = on_step
        self._event = None

    @property
    def running(self):
        return self._event is not None

    def start(self):
        """
        Schedules the first tick.

        :returns: False if already running or there is nothing left to play.
        :rtype: bool
        """
        if self.running or not self.history.can_redo():
            return False
        self._schedule(AUTOPLAY_START_DELAY)
        logging.info("Auto-play started.")
        return True

    def cancel(self):
        """Stops auto-play. Cancelling a stopped player does nothing."""
        if self._event is None:
            return
        self.scheduler.cancel(self._event)
        self._event = None
        logging.info("Auto-play cancelled.")

    def toggle(self):
        if self.running:
            self.cancel()
            return False
        return self.start()

    def run(self):
        """Runs the scheduler until auto-play stops. Blocks the caller."""
        self.scheduler.run()

    def _schedule(self, delay):
        self._event = self.scheduler.enter(delay, 1, self._tick)

    def _tick(self):
        self._event = None
        if not self.history.redo():
            return
        # Schedule before notifying so the callback can cancel the next tick.
        if self.history.can_redo():
            upcoming = self.history.entries[self.history.index + 1].last_move
            self._schedule(AUTOPLAY_PUSH_DELAY if upcoming.is_push else AUTOPLAY_MOVE_DELAY)
        else:
            logging.info("Auto-play reached the end of the history.")
        if self.on_step is not None:
            self.on_step(self.history)


# --- PLAY SESSION ---
class PlaySession:
    """Holds the history and auto-play state of one level being played."""
    def __init__(self, level, initial_moves="", scheduler=None):
        """
        Seeds the session from a parsed level, replaying any initial moves.

        :param LevelState level: The parsed starting level.
        :param str initial_moves: Optional move codes to resume from.
        :param sched.scheduler scheduler: Optional scheduler for auto-play.
        """
        self._attach(replay(level, initial_moves), scheduler)
        self.last_active = time.time()

    def _attach(self, replay_result, scheduler):
        self.replay_result = replay_result
        self.history = replay_result.history
        self.autoplay = AutoPlayer(self.history, scheduler)

    @classmethod
    def from_text(cls, level_text, initial_moves="", scheduler=None):
        """
        Parses level text and starts a session on it.

        :raises LevelParseError: If the text is not a valid level.
        """
        return cls(parse_level(level_text), initial_moves, scheduler)

    @classmethod
    def restore(cls, level, history_string, scheduler=None):
        """
        Starts a session from a history produced by HistoryManager.serialize().

        :param LevelState level: The parsed starting level.
        :param str history_string: The serialized history.
        :rtype: PlaySession
        """
        session = cls(level, scheduler=scheduler)
        session._attach(HistoryManager.replay_serialized(level, history_string), scheduler)
        return session

    def touch(self):
        """Marks the session as used now, keeping it from being evicted."""
        self.last_active = time.time()

    def current_state(self):
        return self.history.current_state()

    def is_solved(self):
        return self.history.current_entry().snapshot.is_solved()

    # --- MOVES ---
    def try_move(self, delta_row, delta_col):
        """
        Applies a player move and records it in the history.

        Any running auto-play is cancelled first.

        :returns: The move outcome; rejected moves leave the session unchanged.
        :rtype: MoveOutcome
        """
        self.autoplay.cancel()
        outcome = apply_move(self.history.current_entry().snapshot, delta_row, delta_col)
        if outcome.ok:
            result = self.history.record_move(outcome.state, outcome.move)
            logging.debug(f"Move {outcome.move.code} recorded as {result}.")
        return outcome

    def move(self, direction):
        """
        Applies a move given by name ('up', 'down', 'left', 'right').

        :raises ValueError: If the direction name is unknown.
        """
        if direction not in DIRECTIONS:
            raise ValueError(f"Unknown direction: {direction!r}")
        return self.try_move(*DIRECTIONS[direction])

    # --- HISTORY CONTROLS ---
    def seek(self, target):
        """
        Runs one of the named seek controls from SEEK_TARGETS.

        :param str target: 'start', 'push', 'move', 'next_move', 'next_push' or 'end'.
        :returns: False if the pointer did not move.
        :rtype: bool
        :raises ValueError: If the target name is unknown.
        """
        if target not in SEEK_TARGETS:
            raise ValueError(f"Unknown seek target: {target!r}")
        self.autoplay.cancel()
        return self.history.seek(*SEEK_TARGETS[target])

    def back_to_start(self):
        return self.seek('start')

    def back_to_push(self):
        return self.seek('push')

    def back_to_move(self):
        return self.seek('move')

    def forward_to_move(self):
        return self.seek('next_move')

    def forward_to_push(self):
        return self.seek('next_push')

    def forward_to_end(self):
        return self.seek('end')

    def jump_to(self, index):
        self.autoplay.cancel()
        return self.history.jump_to(index)

    def controls(self):
        """
        Reports which seek controls are currently usable.

        :returns: Control name mapped to whether it is enabled.
        :rtype: dict[str, bool]
        """
        idle = not self.autoplay.running
        can_back, can_forward = self.history.can_undo(), self.history.can_redo()
        return {
            name: idle and (can_back if direction < 0 else can_forward)
            for name, (direction, _, _) in SEEK_TARGETS.items()
        }

    def to_dict(self):
        """Returns the JSON view of the session used by the API."""
        return {
            'level': self.history.current_entry().snapshot.to_dict(),
            'trail': self.history.move_trail(),
            'index': self.history.index,
            'entryCount': len(self.history),
            'solved': self.is_solved(),
            'controls': self.controls(),
            'autoPlay': self.autoplay.running,
        }
