"""
Configuration module for the Costume Roaster API
Contains logger setup and environment variables
"""

import os
import logging
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


# -------------------------
# Logger Setup
# -------------------------
def setup_logger(name: str = __name__, log_file: str = "costume_roaster.log") -> logging.Logger:
    """
    Set up and return a logger with both file and console handlers

    Args:
        name: Logger name (usually __name__)
        log_file: Path to log file

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)

    # Avoid adding duplicate handlers
    if logger.handlers:
        return logger

    # Create formatter
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    # File handler
    file_handler = logging.FileHandler(log_file, mode="a")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)

    # Add handlers to logger
    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    return logger


# Create the main application logger
logger = setup_logger("costume_roaster", os.getenv("LOG_FILE", "costume_roaster.log"))


def positive_float_env(name: str, default: float) -> float:
    """Read a positive number from the environment, falling back to default."""
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"{name}={raw!r} is not a number, using {default}")
        return default
    if not value > 0:
        logger.warning(f"{name}={raw!r} is not positive, using {default}")
        return default
    return value


# -------------------------
# Environment Variables
# -------------------------
GEMINI_KEY = os.getenv("GEMINI_KEY") or os.getenv("GEMINI_API_KEY")
FISH_AUDIO_API_KEY = os.getenv("FISH_AUDIO_API_KEY")

# gemini models
GEMINI_VISION_MODEL = os.getenv("GEMINI_VISION_MODEL", "gemini-2.0-flash-exp")
GEMINI_IMAGE_MODEL = os.getenv(
    "GEMINI_IMAGE_MODEL", "gemini-2.5-flash-image-preview"
)
UPSTREAM_TIMEOUT_SECONDS = positive_float_env("UPSTREAM_TIMEOUT_SECONDS", 120)

# uploads
MAX_IMAGE_SIZE_MB = positive_float_env("MAX_IMAGE_SIZE_MB", 20)
MAX_IMAGE_SIZE_BYTES = int(MAX_IMAGE_SIZE_MB * 1024 * 1024)

PROMPTS_DIR = os.getenv(
    "PROMPTS_DIR", os.path.join(os.path.dirname(__file__), "prompts")
)

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "*").split(",")
    if origin.strip()
]


# Log configuration status
logger.info("Configuration loaded successfully")
logger.debug(f"GEMINI_KEY configured: {bool(GEMINI_KEY)}")
logger.debug(f"FISH_AUDIO_API_KEY configured: {bool(FISH_AUDIO_API_KEY)}")
logger.debug(f"GEMINI_VISION_MODEL: {GEMINI_VISION_MODEL}")
logger.debug(f"GEMINI_IMAGE_MODEL: {GEMINI_IMAGE_MODEL}")
logger.debug(f"MAX_IMAGE_SIZE_MB: {MAX_IMAGE_SIZE_MB}")
