"""
Configuration module for Toboro.
Loads environment variables and defines constants.
"""

import os
from typing import Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config:
    """Application configuration."""

    # Status endpoint (serves {"data": [...]} / {"error": {...}} bodies)
    STATUS_URL: Optional[str] = os.getenv("STATUS_URL")

    # Index node GraphQL endpoint
    INDEX_NODE_URL: str = os.getenv(
        "INDEX_NODE_URL", "https://api.thegraph.com/index-node/graphql"
    )
    REQUEST_TIMEOUT: int = int(os.getenv("REQUEST_TIMEOUT", "30"))

    # Polling
    AUTO_REFRESH_INTERVAL: float = float(os.getenv("AUTO_REFRESH_INTERVAL", "30"))

    # Shareable query parameter "q"
    QUERY_STATE_FILE: str = os.getenv("QUERY_STATE_FILE", ".toboro_query.json")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE: Optional[str] = os.getenv("LOG_FILE")

    @classmethod
    def validate(cls) -> list[str]:
        """
        Validate configuration and return list of errors.

        Returns:
            List of error messages, empty if valid
        """
        errors = []

        if not cls.INDEX_NODE_URL and not cls.STATUS_URL:
            errors.append("Neither STATUS_URL nor INDEX_NODE_URL is set in .env")

        if cls.REQUEST_TIMEOUT <= 0:
            errors.append("REQUEST_TIMEOUT must be positive")

        if cls.AUTO_REFRESH_INTERVAL <= 0:
            errors.append("AUTO_REFRESH_INTERVAL must be positive")

        if cls.LOG_LEVEL.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            errors.append(f"LOG_LEVEL '{cls.LOG_LEVEL}' is not a logging level")

        return errors
