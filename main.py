# ------------------------------------------------------------------------------
# Main Script for the ZeroFinanx Beta Signup & Admin Web Application
# main.py
# ------------------------------------------------------------------------------
import atexit

from config import get_config
config = get_config()
from logging_config import get_logger
logger = get_logger(__name__)
from utils.db import Database
from utils.path_manager import PathManager

# --------------------------------------------------------------------------
# Configuration Parameters
# --------------------------------------------------------------------------
_debug = config["DEBUG_MODE"]
path_manager = PathManager(config["DATA_DIR"], config["DB_FILENAME"])

logger.info(f"Debug mode is {'enabled' if _debug else 'disabled'}.")
logger.info(f"Data directory: {path_manager.base_dir.resolve()}")

# -----------------------------
# Open the live database
# -----------------------------
database = Database(path_manager.get_db_path())
# Opening eagerly creates the schema before the first request.
database.connection

# Register the cleanup function
atexit.register(database.close)

# -----------------------------
# Import and Run the Web Interface
# -----------------------------
from web.web_interface import create_web_interface

# Expose the Flask server as the WSGI app.
interface = create_web_interface(database, config)
app = interface["server"]

if __name__ == '__main__':
    # Run the web interface
    try:
        interface["run"](debug=_debug, host=config["HOST"], port=config["PORT"])
    except KeyboardInterrupt:
        logger.info("KeyboardInterrupt received. Closing database...")
        database.close()
