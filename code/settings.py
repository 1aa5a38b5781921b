import os
from pathlib import Path

from dotenv import load_dotenv

# Values can be overridden from the environment or a .env file.
load_dotenv()

DATA_DIR = Path(os.getenv("SAKHI_DATA_DIR", Path(__file__).parent / "data"))
ROUTES_FILE = Path(os.getenv("SAKHI_ROUTES_FILE", DATA_DIR / "routes.json"))
ALERTS_FILE = Path(os.getenv("SAKHI_ALERTS_FILE", DATA_DIR / "alerts.json"))

# map
VIEWPORT_PADDING = (int(os.getenv("SAKHI_VIEWPORT_PADDING", "50")),) * 2
DEFAULT_CENTER = (37.7749, -122.4194)
MAP_ZOOM_START = int(os.getenv("SAKHI_MAP_ZOOM", "13"))
MAP_TILES = os.getenv("SAKHI_MAP_TILES", "OpenStreetMap")
MAP_FILE = os.getenv("SAKHI_MAP_FILE", "map.html")

# alerts
ALERT_SELECTION = os.getenv("SAKHI_ALERT_SELECTION", "first")  # first | severity

# server
SERVER_HOST = os.getenv("SAKHI_HOST", "127.0.0.1")
SERVER_PORT = int(os.getenv("SAKHI_PORT", "8000"))
WS_QUEUE_SIZE = int(os.getenv("SAKHI_WS_QUEUE_SIZE", "32"))

LOG_LEVEL = os.getenv("SAKHI_LOG_LEVEL", "INFO")
