"""
Configuration — loads from .env, provides defaults.
"""

import os
from dotenv import load_dotenv

load_dotenv()

# Open-Meteo (no API key)
GEOCODE_URL = os.getenv("GEOCODE_URL", "https://geocoding-api.open-meteo.com/v1/search")
WEATHER_URL = os.getenv("WEATHER_URL", "https://api.open-meteo.com/v1/forecast")
GEOCODE_COUNT = int(os.getenv("GEOCODE_COUNT", "5"))
GEOCODE_LANGUAGE = os.getenv("GEOCODE_LANGUAGE", "en")
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "10"))  # seconds

# Telegram (only bot.py needs the token)
TELEGRAM_BOT_TOKEN = os.getenv("TELEGRAM_BOT_TOKEN", "")
OWNER_CHAT_ID = int(os.environ.get("OWNER_CHAT_ID", "0"))

# Dashboard
DASHBOARD_HOST = os.getenv("DASHBOARD_HOST", "127.0.0.1")
DASHBOARD_PORT = int(os.getenv("DASHBOARD_PORT", "8080"))
DASHBOARD_SECRET = os.getenv("DASHBOARD_SECRET", "change-me-in-production")

# Database
DB_PATH = os.getenv("DB_PATH", "weather.db")
