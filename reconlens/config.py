import os
from pathlib import Path
from typing import List

BASE = Path(__file__).resolve().parent.parent
DATA = Path(os.environ.get("RECONLENS_DATA_DIR", BASE / "data"))

LOG_LEVEL = os.environ.get("RECONLENS_LOG_LEVEL", "INFO").upper()

USER_AGENT = os.environ.get("RECONLENS_USER_AGENT", "ReconLensCrawler/2.0")

# Crawler bounds and budgets (seconds)
ROBOTS_TIMEOUT = float(os.environ.get("RECONLENS_ROBOTS_TIMEOUT", 5))
FETCH_TIMEOUT = float(os.environ.get("RECONLENS_FETCH_TIMEOUT", 10))
DEFAULT_DEPTH = 3
DEFAULT_MAX_PAGES = 20
MAX_DEPTH = 5
MAX_PAGES = 100

# Port scanner bounds and budgets (seconds)
MAX_RANGE_IPS = 16
MAX_PORTS = 64
CONNECT_TIMEOUT = float(os.environ.get("RECONLENS_CONNECT_TIMEOUT", 5))
BANNER_TIMEOUT = float(os.environ.get("RECONLENS_BANNER_TIMEOUT", 3))
BANNER_READ_BYTES = 1024
BANNER_MAX_CHARS = 500
DEFAULT_PORTS: List[int] = [21, 22, 80, 443, 3306, 8080]

GEO_ENDPOINT = os.environ.get(
    "RECONLENS_GEO_ENDPOINT",
    "http://ip-api.com/json/{ip}?fields=status,country,city,isp,org,as,lat,lon",
)
GEO_TIMEOUT = float(os.environ.get("RECONLENS_GEO_TIMEOUT", 5))

STORE_FILE = DATA / "scanned_hosts.jsonl"

HOST = os.environ.get("RECONLENS_HOST", "127.0.0.1")
PORT = int(os.environ.get("RECONLENS_PORT", 8000))

# Seconds a finished job waits for a websocket consumer before it is dropped
JOB_GRACE = float(os.environ.get("RECONLENS_JOB_GRACE", 300))
