"""Agent Cookbook settings with environment variable support."""

import os
from pathlib import Path

# Load .env file from project root
from dotenv import load_dotenv

# Find .env file - check current dir and parent dirs
def _find_env_file() -> Path | None:
    """Find .env file in current or parent directories."""
    current = Path.cwd()
    for _ in range(5):  # Check up to 5 levels
        env_file = current / ".env"
        if env_file.exists():
            return env_file
        current = current.parent
    # Also check package directory
    pkg_dir = Path(__file__).parent.parent
    env_file = pkg_dir / ".env"
    if env_file.exists():
        return env_file
    return None

env_file = _find_env_file()
if env_file:
    load_dotenv(env_file, override=True)  # Override shell profile vars with .env

from pydantic import BaseModel


class AgentSettings(BaseModel):
    """Defaults forwarded to the agent service for each session."""

    default_model: str = os.getenv("AGENT__DEFAULT_MODEL", "opus")
    max_turns: int = int(os.getenv("AGENT__MAX_TURNS", "250"))
    permission_mode: str = os.getenv("AGENT__PERMISSION_MODE", "bypassPermissions")
    anthropic_api_key: str | None = os.getenv("ANTHROPIC_API_KEY")


class LogSettings(BaseModel):
    """Loguru sink settings for the CLI."""

    level: str = os.getenv("LOG__LEVEL", "INFO")


class SimulatorSettings(BaseModel):
    """Offline event source settings."""

    delay: float = float(os.getenv("SIMULATOR__DELAY", "0"))


class Settings(BaseModel):
    """Application settings."""

    agent: AgentSettings = AgentSettings()
    log: LogSettings = LogSettings()
    simulator: SimulatorSettings = SimulatorSettings()
    environment: str = os.getenv("ENVIRONMENT", "development")


settings = Settings()
