# run.py
# This script launches the Flask application.
# Install the project in editable mode (pip install -e .) so the
# 'sokoban_backend' package is importable without any path manipulation.

import logging

from sokoban_backend.app import app
from sokoban_backend.constants import DEFAULT_HOST, DEFAULT_PORT, DEBUG

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)

if __name__ == '__main__':
    # Set FLASK_DEBUG=1 for auto-reloading when backend files are changed.
    app.run(host=DEFAULT_HOST, port=DEFAULT_PORT, debug=DEBUG)
