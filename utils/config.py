"""
Configuration Management

Simple utility for loading and validating environment configuration.
"""

import os
from typing import Optional
from dotenv import load_dotenv


def load_config(env_path: Optional[str] = None) -> bool:
    """
    Load environment configuration from .env file.

    Args:
        env_path: Optional path to .env file. If None, searches in current directory.

    Returns:
        bool: True if .env file was found and loaded, False otherwise
    """
    if env_path:
        return load_dotenv(env_path)
    return load_dotenv()


def get_database_config() -> dict:
    """
    Get configuration for the picker store database.

    Returns:
        dict: Database configuration

    Raises:
        ValueError: If required configuration is missing
    """
    config = {
        "host": os.getenv("PICKERDB_HOST"),
        "port": os.getenv("PICKERDB_PORT"),
        "database": os.getenv("PICKERDB_NAME"),
        "user": os.getenv("PICKERDB_USER"),
        "password": os.getenv("PICKERDB_PASS"),
    }

    # Validate
    missing = [k for k, v in config.items() if not v]
    if missing:
        raise ValueError(
            f"Missing picker database configuration: {missing}. "
            f"Please check your .env file."
        )

    return config


def get_app_config() -> dict:
    """
    Get application configuration settings.

    Returns:
        dict: Application settings
    """
    return {
        "timezone": os.getenv("TIMEZONE", "Europe/Copenhagen"),
        "shift_start": os.getenv("SHIFT_START", "09:00"),
        "shift_end": os.getenv("SHIFT_END", "17:00"),
        "lunch_start": os.getenv("LUNCH_START", "12:00"),
        "lunch_end": os.getenv("LUNCH_END", "13:00"),
        "short_break_start": os.getenv("SHORT_BREAK_START", "15:00"),
        "default_target_lines_per_hour": int(os.getenv("DEFAULT_TARGET_LINES_PER_HOUR", "100")),
        "refresh_interval_seconds": int(os.getenv("REFRESH_INTERVAL_SECONDS", "60")),
    }


def is_store_configured() -> bool:
    """True when every PICKERDB_* connection setting is present."""
    try:
        get_database_config()
        return True
    except ValueError:
        return False


def validate_config() -> list:
    """
    Validate configuration.

    Returns:
        list: Problems found (empty if all valid). A missing picker database is
        reported but is not fatal: the dashboard runs on seeded pickers.
    """
    problems = []

    try:
        get_database_config()
    except ValueError as e:
        problems.append(f"PICKERDB: {str(e)}")

    try:
        get_app_config()
    except ValueError as e:
        problems.append(f"APP: {str(e)}")
        return problems

    try:
        from core.time_windows.models import ShiftSchedule
        ShiftSchedule.from_config()
    except ValueError as e:
        problems.append(f"SHIFT: {str(e)}")

    return problems
