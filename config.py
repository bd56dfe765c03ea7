"""
Configuration Management
Loads and validates environment variables
"""
import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    """Application configuration"""

    # Picker store database
    PICKERDB_HOST = os.getenv("PICKERDB_HOST")
    PICKERDB_PORT = int(os.getenv("PICKERDB_PORT", 5432))
    PICKERDB_NAME = os.getenv("PICKERDB_NAME")
    PICKERDB_USER = os.getenv("PICKERDB_USER")
    PICKERDB_PASS = os.getenv("PICKERDB_PASS")

    # Application Settings
    TIMEZONE = os.getenv("TIMEZONE", "Europe/Copenhagen")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    REFRESH_INTERVAL_SECONDS = int(os.getenv("REFRESH_INTERVAL_SECONDS", 60))

    # Shift Schedule Configuration
    SHIFT_START = os.getenv("SHIFT_START", "09:00")
    SHIFT_END = os.getenv("SHIFT_END", "17:00")
    LUNCH_START = os.getenv("LUNCH_START", "12:00")
    LUNCH_END = os.getenv("LUNCH_END", "13:00")
    SHORT_BREAK_START = os.getenv("SHORT_BREAK_START", "15:00")

    # Fallback hourly target per picker when no picker targets are set
    DEFAULT_TARGET_LINES_PER_HOUR = int(os.getenv("DEFAULT_TARGET_LINES_PER_HOUR", 100))

    # Picker statuses accepted by the store and the dashboard
    PICKER_STATUSES = ('active', 'break', 'offline')
