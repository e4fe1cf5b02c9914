"""**********************************************************************************
 * Title: level_parser.py
 *
 * @version 1.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * This module converts level text into a LevelState. The level is cropped to
 * the bounding rectangle of its structural symbols (walls, goals, boxes,
 * boxes on goals and the player), so surrounding blank rows, indentation and
 * trailing filler are discarded. Structural problems raise one of the
 * LevelParseError subclasses so callers can reject the input outright.
 * It also handles the level-list files the API serves: comment stripping,
 * splitting on blank lines and loading from disk, plus a text renderer used
 * for debug output.
 **********************************************************************************"""

# --- IMPORTS ---
import os
import re
import logging

from sokoban_backend.level_state import LevelState
from sokoban_backend.constants import (
    SYMBOL_WALL, SYMBOL_GOAL, SYMBOL_BOX, SYMBOL_BOX_ON_GOAL, SYMBOL_PLAYER,
    SYMBOL_FLOOR, STRUCTURAL_SYMBOLS, LEVEL_LIST_COMMENT_PREFIX,
    DEFAULT_LEVELS_FILE, LEVELS_FILE_ENV
)


# --- PARSE ERRORS ---
class LevelParseError(ValueError):
    """Base class for structurally invalid level text."""
    kind = 'invalid_level'


class EmptyLevelError(LevelParseError):
    kind = 'empty_level'


class MultiplePlayersError(LevelParseError):
    kind = 'multiple_players'


class NoPlayerError(LevelParseError):
    kind = 'no_player'


# --- LEVEL PARSING ---
def _bounding_box(lines):
    """
    Finds the smallest rectangle covering every structural symbol.

    :param list[str] lines: The level text split into rows.
    :returns: (min_r, max_r, min_c, max_c), or None if no symbol was found.
    :rtype: tuple[int, int, int, int] | None
    """
    min_r = min_c = None
    max_r = max_c = -1
    for r, line in enumerate(lines):
        for c, ch in enumerate(line):
            if ch not in STRUCTURAL_SYMBOLS:
                continue
            min_r = r if min_r is None else min(min_r, r)
            min_c = c if min_c is None else min(min_c, c)
            max_r, max_c = max(max_r, r), max(max_c, c)
    if min_r is None:
        return None
    return min_r, max_r, min_c, max_c


def parse_level(level_text):
    """
    Parses a single level into a LevelState.

    Rows shorter than the bounding rectangle are padded with empty floor.

    :param str level_text: The level, one row per line.
    :returns: The parsed initial state.
    :rtype: LevelState
    :raises EmptyLevelError: If the text contains no structural symbol.
    :raises MultiplePlayersError: If more than one player symbol is found.
    :raises NoPlayerError: If no player symbol is found.
    """
    # Only '\n' separates rows; any other control character is a floor cell.
    lines = (level_text or '').replace('\r\n', '\n').split('\n')
    bounds = _bounding_box(lines)
    if bounds is None:
        raise EmptyLevelError("Level contains no walls, goals, boxes or player.")
    min_r, max_r, min_c, max_c = bounds
    height, width = max_r - min_r + 1, max_c - min_c + 1

    walls, goals, boxes = [], [], []
    player = None
    for r in range(min_r, max_r + 1):
        line = lines[r]
        wall_row, goal_row, box_row = [], [], []
        for c in range(min_c, max_c + 1):
            ch = line[c] if c < len(line) else SYMBOL_FLOOR
            if ch == SYMBOL_PLAYER:
                if player is not None:
                    raise MultiplePlayersError(
                        f"Found a second player at row {r - min_r}, column {c - min_c}."
                    )
                player = (r - min_r, c - min_c)
            wall_row.append(ch == SYMBOL_WALL)
            goal_row.append(ch in (SYMBOL_GOAL, SYMBOL_BOX_ON_GOAL))
            box_row.append(ch in (SYMBOL_BOX, SYMBOL_BOX_ON_GOAL))
        walls.append(wall_row)
        goals.append(goal_row)
        boxes.append(box_row)

    if player is None:
        raise NoPlayerError("Level has no player starting position.")

    return LevelState(height, width, player[0], player[1], walls, goals, boxes)


def level_to_text(state):
    """
    Renders a state back into level text.

    The format has no symbol for a player standing on a goal, so the player
    always wins and is drawn as '@'.

    :param LevelState state: The state to render.
    :returns: The level text, rows joined by newlines.
    :rtype: str
    """
    rows = []
    for r in range(state.height):
        row = []
        for c in range(state.width):
            if (r, c) == (state.player_row, state.player_col):
                row.append(SYMBOL_PLAYER)
            elif state.walls[r][c]:
                row.append(SYMBOL_WALL)
            elif state.boxes[r][c]:
                row.append(SYMBOL_BOX_ON_GOAL if state.goals[r][c] else SYMBOL_BOX)
            elif state.goals[r][c]:
                row.append(SYMBOL_GOAL)
            else:
                row.append(SYMBOL_FLOOR)
        rows.append(''.join(row).rstrip())
    return '\n'.join(rows)


# --- LEVEL LISTS ---
def split_level_list(list_text):
    """
    Splits the contents of a level-list file into individual level texts.

    Comment lines are blanked first, then levels are separated on runs of
    two or more newlines.

    :param str list_text: The raw file contents.
    :returns: The level texts in file order.
    :rtype: list[str]
    """
    text = list_text.replace('\r\n', '\n')
    text = re.sub(rf'^{re.escape(LEVEL_LIST_COMMENT_PREFIX)}.*$', '', text, flags=re.MULTILINE)
    text = text.strip('\n')
    if not text:
        return []
    return re.split(r'\n{2,}', text)


def load_levels_from_file(file_path=None):
    """
    Loads every level from a level-list file.

    The path defaults to the SOKOBAN_LEVELS_FILE environment variable, then
    to the bundled 'levels/levels.txt'.

    :param str | None file_path: Optional explicit path to the file.
    :returns: The level texts, or an empty list if the file is missing.
    :rtype: list[str]
    """
    file_path = file_path or os.environ.get(LEVELS_FILE_ENV) or DEFAULT_LEVELS_FILE
    logging.info(f"Loading levels from: {file_path}")
    if not os.path.exists(file_path):
        logging.error(f"Level file not found at {file_path}")
        return []

    with open(file_path, 'r', encoding='utf-8') as f:
        levels = split_level_list(f.read())

    if not levels:
        logging.error(f"No levels found in {file_path}")
    else:
        logging.info(f"Loaded {len(levels)} levels.")
    return levels
