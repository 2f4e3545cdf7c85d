# fraud_monitor/config.py
import os
from dotenv import load_dotenv

load_dotenv()

# HTTP server
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3001"))
CORS_ORIGIN = os.getenv("CORS_ORIGIN", "http://localhost:3000")

# MongoDB configuration
MONGODB_URL = os.getenv("MONGODB_URL")
MONGODB_DB_NAME = os.getenv("MONGODB_DB_NAME", "fraud_detection")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Push channel
FRAUD_ALERTS_ROOM = "fraud-alerts"
WS_SEND_TIMEOUT = float(os.getenv("WS_SEND_TIMEOUT", "5"))  # seconds per frame
WS_MAX_QUEUED = int(os.getenv("WS_MAX_QUEUED", "100"))  # frames waiting per client

SERVICE_NAME = "fraud-detection-web-backend"
VERSION = "1.0.0"


def cors_origins():
    """CORS_ORIGIN may hold a comma separated list of origins"""
    return [o.strip() for o in CORS_ORIGIN.split(",") if o.strip()]
