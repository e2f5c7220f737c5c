"""Configuration management for poreconcile."""

import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """Application configuration."""

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Catalogs
    DEFAULT_ENCODING: str = os.getenv("PORECONCILE_ENCODING", "utf-8")
    WRAP_WIDTH: int = int(os.getenv("PORECONCILE_WRAP_WIDTH", "76"))

    # Reports
    LINE_HINT_LENGTH: int = int(os.getenv("PORECONCILE_LINE_HINT_LENGTH", "70"))


config = Config()
