"""Tests for sokoban_backend.history_manager."""

import pytest

from sokoban_backend.constants import DOWN, LEFT, RECORD_APPEND, RECORD_REDO, RECORD_UNDO, RIGHT, UP
from sokoban_backend.history_manager import HistoryManager
from sokoban_backend.level_parser import parse_level
from sokoban_backend.move_engine import apply_move

CORRIDOR = """
#########
#@  $  .#
#########
"""

ROOM = """
#######
#     #
# @ $.#
#     #
#######
"""


def play(history, *deltas):
    """Applies moves from the current history entry, recording each one."""
    results = []
    for delta in deltas:
        outcome = apply_move(history.current_entry().snapshot, *delta)
        assert outcome.ok, outcome.rejection
        results.append(history.record_move(outcome.state, outcome.move))
    return results


def append(history, *deltas):
    for delta in deltas:
        outcome = apply_move(history.current_entry().snapshot, *delta)
        assert outcome.ok, outcome.rejection
        history.append_move(outcome.state, outcome.move)


@pytest.fixture
def corridor():
    return parse_level(CORRIDOR)


class TestInitialHistory:
    def test_single_entry(self, corridor):
        history = HistoryManager(corridor)
        assert len(history) == 1
        assert history.index == 0
        assert history.entries[0].last_move is None
        assert history.current_state() == corridor
        assert not history.can_undo() and not history.can_redo()
        assert history.move_trail() == ":"

    def test_owns_copy_of_initial_state(self, corridor):
        history = HistoryManager(corridor)
        corridor.boxes[1][4] = False
        assert history.current_state().boxes[1][4]

    def test_current_state_is_a_copy(self, corridor):
        history = HistoryManager(corridor)
        state = history.current_state()
        state.boxes[1][4] = False
        assert history.entries[0].snapshot.boxes[1][4]


class TestRecordMove:
    def test_append(self, corridor):
        history = HistoryManager(corridor)
        assert play(history, RIGHT, RIGHT) == [RECORD_APPEND, RECORD_APPEND]
        assert history.index == 2
        assert history.move_trail() == "rr:"

    def test_implicit_undo(self, corridor):
        history = HistoryManager(corridor)
        play(history, RIGHT, RIGHT)
        assert play(history, LEFT) == [RECORD_UNDO]
        assert history.index == 1
        assert len(history) == 3
        assert history.move_trail() == "r:r"

    def test_implicit_redo(self, corridor):
        history = HistoryManager(corridor)
        play(history, RIGHT, RIGHT)
        history.jump_to(0)
        assert play(history, RIGHT) == [RECORD_REDO]
        assert history.index == 1
        assert len(history) == 3

    def test_back_and_forth_does_not_branch(self, corridor):
        history = HistoryManager(corridor)
        play(history, RIGHT, LEFT, RIGHT, LEFT, RIGHT)
        assert len(history) == 2
        assert history.index == 1

    def test_divergent_move_truncates_redo_tail(self):
        history = HistoryManager(parse_level(ROOM))
        play(history, RIGHT, RIGHT, UP)
        history.jump_to(1)
        assert play(history, DOWN) == [RECORD_APPEND]
        assert len(history) == 3
        assert history.index == 2
        assert history.move_codes() == "rd"

    def test_redo_preferred_over_undo(self):
        # Entries 0 and 2 hold the same position; redo is checked first.
        history = HistoryManager(parse_level(ROOM))
        append(history, RIGHT, LEFT, RIGHT)
        history.jump_to(1)
        assert play(history, LEFT) == [RECORD_REDO]
        assert history.index == 2


class TestSeek:
    def test_backward_push_seek_stops_on_push(self):
        history = HistoryManager(parse_level(CORRIDOR))
        play(history, RIGHT, RIGHT, RIGHT, LEFT)
        assert [e.last_move.is_push for e in history.entries[1:]] == [False, False, True, False]
        assert history.seek(-1, False, True)
        assert history.index == 3

    def test_backward_push_seek_without_push_reaches_start(self, corridor):
        history = HistoryManager(corridor)
        play(history, RIGHT, RIGHT)
        assert history.seek(-1, False, True)
        assert history.index == 0

    def test_forward_push_seek(self):
        history = HistoryManager(parse_level(CORRIDOR))
        play(history, RIGHT, RIGHT, RIGHT, LEFT)
        history.jump_to(0)
        assert history.seek(1, False, True)
        assert history.index == 3
        assert history.seek(1, False, True)
        assert history.index == 4

    def test_seek_to_boundaries(self, corridor):
        history = HistoryManager(corridor)
        play(history, RIGHT, RIGHT, RIGHT)
        assert history.seek(-1, False, False)
        assert history.index == 0
        assert history.seek(1, False, False)
        assert history.index == 3

    def test_single_step(self, corridor):
        history = HistoryManager(corridor)
        play(history, RIGHT, RIGHT)
        assert history.seek(-1, True, False)
        assert history.index == 1

    def test_noop_at_boundary(self, corridor):
        history = HistoryManager(corridor)
        assert not history.seek(-1, True, True)
        assert not history.seek(1, False, False)
        play(history, RIGHT)
        assert not history.seek(1, True, True)
        assert history.index == 1

    def test_invalid_direction(self, corridor):
        with pytest.raises(ValueError):
            HistoryManager(corridor).seek(0, True, True)

    def test_undo_redo_round_trip(self, corridor):
        history = HistoryManager(corridor)
        play(history, RIGHT, RIGHT, RIGHT)
        before = history.current_state()
        assert history.undo()
        assert history.current_state() != before
        assert history.redo()
        assert history.current_state() == before

    def test_seek_does_not_modify_entries(self, corridor):
        history = HistoryManager(corridor)
        play(history, RIGHT, RIGHT)
        entries = list(history.entries)
        history.seek(-1, False, False)
        history.seek(1, True, True)
        assert history.entries == entries


class TestJumpTo:
    def test_valid(self, corridor):
        history = HistoryManager(corridor)
        play(history, RIGHT, RIGHT)
        assert history.jump_to(1)
        assert history.index == 1
        assert history.current_state().player_col == 2

    @pytest.mark.parametrize("index", [-1, 3, 100])
    def test_out_of_range_is_noop(self, corridor, index):
        history = HistoryManager(corridor)
        play(history, RIGHT, RIGHT)
        assert not history.jump_to(index)
        assert history.index == 2


class TestTrailAndSerialization:
    def test_trail_marks_pushes_and_index(self, corridor):
        history = HistoryManager(corridor)
        play(history, RIGHT, RIGHT, RIGHT, RIGHT)
        history.jump_to(2)
        assert history.move_trail() == "rr:RR"
        assert history.move_codes() == "rrRR"

    def test_serialize_empty(self, corridor):
        assert HistoryManager(corridor).serialize() == ""

    def test_serialize_round_trip(self, corridor):
        history = HistoryManager(corridor)
        play(history, RIGHT, RIGHT, RIGHT)
        history.jump_to(1)
        text = history.serialize()
        assert text == "h:rrR:1"
        restored = HistoryManager.deserialize(corridor, text)
        assert restored.index == 1
        assert restored.move_trail() == "r:rR"
        assert [e.snapshot for e in restored.entries] == [e.snapshot for e in history.entries]

    @pytest.mark.parametrize("text", ["", "garbage", "x:rr:1", "h:rr:one", "h:rr"])
    def test_deserialize_malformed(self, corridor, text):
        restored = HistoryManager.deserialize(corridor, text)
        assert len(restored) == 1
        assert restored.index == 0

    def test_deserialize_clamps_index(self, corridor):
        restored = HistoryManager.deserialize(corridor, "h:rrrrrrr:7")
        # the sixth move would push the box into the wall
        assert restored.move_codes() == "rrRRR"
        assert restored.index == 5

    def test_replay_serialized_reports_counts(self, corridor):
        result = HistoryManager.replay_serialized(corridor, "h:rrrrrrr:7")
        assert (result.applied, result.total, result.skipped, result.failed_at) == (5, 7, 0, 5)
        assert not result.complete
        assert result.history.index == 5

    def test_replay_serialized_malformed_is_empty(self, corridor):
        result = HistoryManager.replay_serialized(corridor, "x:rr:1")
        assert (result.applied, result.total) == (0, 0)
        assert len(result.history) == 1

    def test_reset(self, corridor):
        history = HistoryManager(corridor)
        play(history, RIGHT)
        history.reset(parse_level(ROOM))
        assert len(history) == 1
        assert history.index == 0
        assert history.current_state().width == 7
