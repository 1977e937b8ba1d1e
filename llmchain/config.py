"""Configuration for llmchain.

Values are read from the environment (and an optional .env file) once, at
import time. Backends and memory stores receive them explicitly through
their config objects.
"""

import logging
import os

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# ============================================================================
# Logging
# ============================================================================

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# ============================================================================
# Model backends
# ============================================================================

OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL")  # None = official endpoint
OLLAMA_BASE_URL = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
DEFAULT_MODEL = os.getenv("LLMCHAIN_DEFAULT_MODEL", "gpt-4o-mini")
DEFAULT_EMBEDDING_MODEL = os.getenv("LLMCHAIN_EMBEDDING_MODEL", "text-embedding-3-small")


def get_float(env_var: str, default: float) -> float:
    """Get a float from the environment or return default."""
    try:
        return float(os.getenv(env_var, default))
    except ValueError:
        logger.warning(f"Invalid {env_var}, using default {default}")
        return default


def get_int(env_var: str, default: int) -> int:
    """Get an int from the environment or return default."""
    try:
        return int(os.getenv(env_var, default))
    except ValueError:
        logger.warning(f"Invalid {env_var}, using default {default}")
        return default


# Backend request timeout in seconds
DEFAULT_TIMEOUT = get_float("LLMCHAIN_TIMEOUT", 120.0)

# ============================================================================
# Memory
# ============================================================================

MEMORY_NAMESPACE = os.getenv("LLMCHAIN_MEMORY_NAMESPACE", "llmchain:memory")


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger once for command-line use."""
    logging.basicConfig(
        level=getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO),
        format=LOG_FORMAT,
    )
