"""**********************************************************************************
 * Title: constants.py
 *
 * @version 1.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * This file contains all the static data and constants for the Sokoban
 * backend. It centralizes the level text symbols, the move-code alphabet
 * used for replaying and displaying move histories, the rejection and
 * history outcome identifiers, the auto-play timings, and the configuration
 * values the Flask API reads from the environment.
 **********************************************************************************"""

import os

# --- LEVEL TEXT SYMBOLS ---
# The five structural symbols of the level text format. Every other
# character is non-structural and is treated as empty floor.
SYMBOL_WALL = '#'
SYMBOL_GOAL = '.'
SYMBOL_BOX = '$'
SYMBOL_BOX_ON_GOAL = '*'
SYMBOL_PLAYER = '@'
SYMBOL_FLOOR = ' '
STRUCTURAL_SYMBOLS = frozenset(
    [SYMBOL_WALL, SYMBOL_GOAL, SYMBOL_BOX, SYMBOL_BOX_ON_GOAL, SYMBOL_PLAYER]
)

# Lines in a level-list file starting with this prefix are comments.
LEVEL_LIST_COMMENT_PREFIX = ';'

# --- DIRECTIONS ---
# (delta_row, delta_col) for each of the four axis-aligned moves.
UP = (-1, 0)
DOWN = (1, 0)
LEFT = (0, -1)
RIGHT = (0, 1)

DIRECTIONS = {
    'up': UP,
    'down': DOWN,
    'left': LEFT,
    'right': RIGHT,
}

# Move-code alphabet for replay strings. Case carries no meaning on input.
MOVE_CODE_TO_DELTA = {
    'u': UP, 'U': UP,
    'd': DOWN, 'D': DOWN,
    'l': LEFT, 'L': LEFT,
    'r': RIGHT, 'R': RIGHT,
}

# Trail symbols for recorded moves: lowercase for a walk, uppercase for a push.
DELTA_TO_MOVE_CODE = {UP: 'u', DOWN: 'd', LEFT: 'l', RIGHT: 'r'}
UNKNOWN_MOVE_CODE = '?'
TRAIL_INDEX_MARKER = ':'

# --- MOVE REJECTION REASONS ---
REJECT_BLOCKED = 'blocked'
REJECT_PUSH_BLOCKED = 'push_blocked'

# --- HISTORY RECORDING OUTCOMES ---
RECORD_APPEND = 'append'
RECORD_UNDO = 'undo'
RECORD_REDO = 'redo'

# Serialized history prefix, "h:<codes>:<index>".
HISTORY_PREFIX = 'h'

# --- SEEK TARGETS ---
# Maps a control name to (direction, stop_at_move, stop_at_push).
SEEK_TARGETS = {
    'start': (-1, False, False),
    'push': (-1, False, True),
    'move': (-1, True, True),
    'next_move': (1, True, True),
    'next_push': (1, False, True),
    'end': (1, False, False),
}

# --- AUTO-PLAY TIMINGS (seconds) ---
AUTOPLAY_START_DELAY = 0.1
AUTOPLAY_MOVE_DELAY = 0.075
AUTOPLAY_PUSH_DELAY = 0.25

# --- CONFIGURATION ---
DEFAULT_LEVELS_FILE = os.path.join(os.path.dirname(__file__), 'levels', 'levels.txt')
LEVELS_FILE_ENV = 'SOKOBAN_LEVELS_FILE'

DEFAULT_HOST = os.environ.get('HOST', '0.0.0.0')
DEFAULT_PORT = int(os.environ.get('PORT', 5001))
DEBUG = os.environ.get('FLASK_DEBUG', '0') == '1'
CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')

# Sessions idle for longer than this many seconds are evicted.
SESSION_TIMEOUT = 3600
