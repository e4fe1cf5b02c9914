"""**********************************************************************************
 * Title: app.py
 *
 * @version 1.0.0
 * -------------------------------------------------------------------------------
 * Description:
 * The Flask API for the Sokoban frontend. It serves the bundled level list,
 * creates play sessions from level text (optionally resuming from a move
 * string), and forwards moves, seeks and history jumps to the session.
 * Every response carries the session view the frontend renders from.
 * Sessions idle for longer than SESSION_TIMEOUT are evicted whenever levels
 * are listed or a new session is created.
 **********************************************************************************"""

# --- IMPORTS ---
import time
import uuid
import logging

from flask import Flask, jsonify, request
from flask_cors import CORS

from sokoban_backend import level_parser as lp
from sokoban_backend.session import PlaySession
from sokoban_backend.constants import CORS_ORIGINS, SESSION_TIMEOUT

app = Flask(__name__)
CORS(app, origins=CORS_ORIGINS)

# Active sessions keyed by id. One session per browser tab.
sessions = {}


def cleanup_stale_sessions(now=None):
    """Drops sessions that have not been used for SESSION_TIMEOUT seconds."""
    now = time.time() if now is None else now
    stale = [sid for sid, s in sessions.items() if now - s.last_active > SESSION_TIMEOUT]
    for sid in stale:
        sessions.pop(sid).autoplay.cancel()
        logging.info(f"Cleaned up stale session {sid}")
    return len(stale)


def _session_or_404(session_id):
    session = sessions.get(session_id)
    if session is None:
        return None, (jsonify({'error': 'Unknown session'}), 404)
    session.touch()
    return session, None


def _replay_view(result):
    return {
        'applied': result.applied,
        'total': result.total,
        'skipped': result.skipped,
        'failedAt': result.failed_at,
    }


@app.route('/api/levels', methods=['GET'])
def list_levels():
    cleanup_stale_sessions()
    try:
        levels = lp.load_levels_from_file(app.config.get('LEVELS_FILE'))
        return jsonify({'levels': levels})
    except Exception as e:
        logging.error(f"Error in /api/levels: {e}")
        return jsonify({'error': 'An internal error occurred'}), 500


@app.route('/api/sessions', methods=['POST'])
def create_session():
    cleanup_stale_sessions()
    try:
        data = request.get_json(silent=True) or {}
        level_text = data.get('levelText')
        initial_moves = data.get('initialMoves', '')
        if level_text is not None and not isinstance(level_text, str):
            return jsonify({'error': 'levelText must be a string'}), 400
        if not isinstance(initial_moves, str):
            return jsonify({'error': 'initialMoves must be a string'}), 400
        if level_text is None and data.get('levelIndex') is not None:
            levels = lp.load_levels_from_file(app.config.get('LEVELS_FILE'))
            index = int(data['levelIndex'])
            if not 0 <= index < len(levels):
                return jsonify({'error': 'Invalid levelIndex'}), 400
            level_text = levels[index]
        if level_text is None:
            return jsonify({'error': 'Missing levelText or levelIndex in request'}), 400

        session = PlaySession.from_text(level_text, initial_moves)
        session_id = uuid.uuid4().hex
        sessions[session_id] = session
        result = session.replay_result
        logging.info(f"Created session {session_id}; replayed {result.applied}/{result.total} moves.")
        return jsonify({
            'sessionId': session_id,
            'session': session.to_dict(),
            'replay': _replay_view(result),
        }), 201
    except lp.LevelParseError as e:
        logging.warning(f"Rejected level definition: {e}")
        return jsonify({'error': 'Invalid level definition', 'kind': e.kind, 'detail': str(e)}), 400
    except (TypeError, ValueError) as e:
        return jsonify({'error': f'Bad request: {e}'}), 400
    except Exception as e:
        logging.error(f"Error in /api/sessions: {e}")
        return jsonify({'error': 'An internal error occurred'}), 500


@app.route('/api/sessions/<session_id>', methods=['GET'])
def get_session(session_id):
    session, error = _session_or_404(session_id)
    if error:
        return error
    return jsonify({'session': session.to_dict()})


@app.route('/api/sessions/<session_id>', methods=['DELETE'])
def delete_session(session_id):
    session = sessions.pop(session_id, None)
    if session is None:
        return jsonify({'error': 'Unknown session'}), 404
    session.autoplay.cancel()
    return jsonify({'deleted': session_id})


@app.route('/api/sessions/<session_id>/move', methods=['POST'])
def move(session_id):
    session, error = _session_or_404(session_id)
    if error:
        return error
    try:
        direction = (request.get_json(silent=True) or {}).get('direction')
        outcome = session.move(direction)
        return jsonify({
            'moved': outcome.ok,
            'rejection': outcome.rejection,
            'push': bool(outcome.move and outcome.move.is_push),
            'session': session.to_dict(),
        })
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        logging.error(f"Error in /api/sessions/{session_id}/move: {e}")
        return jsonify({'error': 'An internal error occurred'}), 500


@app.route('/api/sessions/<session_id>/seek', methods=['POST'])
def seek(session_id):
    session, error = _session_or_404(session_id)
    if error:
        return error
    try:
        target = (request.get_json(silent=True) or {}).get('target')
        moved = session.seek(target)
        return jsonify({'moved': moved, 'session': session.to_dict()})
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        logging.error(f"Error in /api/sessions/{session_id}/seek: {e}")
        return jsonify({'error': 'An internal error occurred'}), 500


@app.route('/api/sessions/<session_id>/jump', methods=['POST'])
def jump(session_id):
    session, error = _session_or_404(session_id)
    if error:
        return error
    try:
        index = int((request.get_json(silent=True) or {}).get('index'))
        moved = session.jump_to(index)
        return jsonify({'moved': moved, 'session': session.to_dict()})
    except (TypeError, ValueError):
        return jsonify({'error': 'Missing or invalid index'}), 400
    except Exception as e:
        logging.error(f"Error in /api/sessions/{session_id}/jump: {e}")
        return jsonify({'error': 'An internal error occurred'}), 500


@app.route('/api/sessions/<session_id>/export', methods=['GET'])
def export_history(session_id):
    session, error = _session_or_404(session_id)
    if error:
        return error
    return jsonify({
        'level': lp.level_to_text(session.history.initial_state()),
        'history': session.history.serialize(),
    })


@app.route('/api/import', methods=['POST'])
def import_history():
    """Starts a session from exported level text and history string."""
    cleanup_stale_sessions()
    try:
        data = request.get_json(silent=True) or {}
        level_text, history_string = data.get('level') or '', data.get('history') or ''
        if not isinstance(level_text, str) or not isinstance(history_string, str):
            return jsonify({'error': 'level and history must be strings'}), 400
        session = PlaySession.restore(lp.parse_level(level_text), history_string)
        session_id = uuid.uuid4().hex
        sessions[session_id] = session
        result = session.replay_result
        logging.info(f"Imported session {session_id}; replayed {result.applied}/{result.total} moves.")
        return jsonify({
            'sessionId': session_id,
            'session': session.to_dict(),
            'replay': _replay_view(result),
        }), 201
    except lp.LevelParseError as e:
        return jsonify({'error': 'Invalid level definition', 'kind': e.kind, 'detail': str(e)}), 400
    except Exception as e:
        logging.error(f"Error in /api/import: {e}")
        return jsonify({'error': 'An internal error occurred'}), 500
