"""
Configuration — loads from .env, provides defaults.
"""

import os
from dotenv import load_dotenv

load_dotenv()

# Telegram (only required by bot.main)
TELEGRAM_BOT_TOKEN = os.getenv("TELEGRAM_BOT_TOKEN", "")
OWNER_CHAT_ID = int(os.environ.get("OWNER_CHAT_ID", "0"))

# Dashboard
DASHBOARD_HOST = os.getenv("DASHBOARD_HOST", "127.0.0.1")
DASHBOARD_PORT = int(os.getenv("DASHBOARD_PORT", "8080"))

# Sessions
SESSION_IDLE_TIMEOUT = int(os.getenv("SESSION_IDLE_TIMEOUT", "3600"))  # seconds

# Open-Meteo endpoints
GEOCODING_URL = os.getenv("GEOCODING_URL", "https://geocoding-api.open-meteo.com/v1/search")
FORECAST_URL = os.getenv("FORECAST_URL", "https://api.open-meteo.com/v1/forecast")
LANGUAGE = os.getenv("LANGUAGE", "en")
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "10"))  # seconds

# Autocomplete
SUGGEST_DEBOUNCE_MS = int(os.getenv("SUGGEST_DEBOUNCE_MS", "150"))
SUGGEST_MIN_CHARS = int(os.getenv("SUGGEST_MIN_CHARS", "2"))
SUGGEST_MAX_RESULTS = int(os.getenv("SUGGEST_MAX_RESULTS", "5"))
SUGGEST_HIDE_ON_ERROR = os.getenv("SUGGEST_HIDE_ON_ERROR", "false").lower() in {"1", "true", "yes"}

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
