import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from a local .env file if present.
load_dotenv()

# Base directory for package assets.
BASE_DIR = Path(__file__).resolve().parent

# The form page and its assets.
STATIC_DIR = Path(os.getenv("BRANDBOOST_STATIC_DIR", BASE_DIR / "static"))

# Model choices can be overridden via environment variables if desired.
GENERATION_MODEL = os.getenv("BRANDBOOST_MODEL", "gpt-4.1")
IMAGE_OUTPUT_FORMAT = os.getenv("BRANDBOOST_IMAGE_FORMAT", "png")

# Upload limits.
MAX_FILE_SIZE = int(os.getenv("BRANDBOOST_MAX_FILE_SIZE", 5 * 1024 * 1024))
ACCEPTED_IMAGE_TYPES = ("image/jpeg", "image/jpg", "image/png", "image/webp")

# Form defaults.
ASSET_TYPES = ("Social Media Post", "Website Banner", "Email Header", "Flyer")
DEFAULT_ASSET_TYPE = ASSET_TYPES[0]
MIN_BUSINESS_NAME_LENGTH = 2

# Download conversion.
JPEG_QUALITY = int(os.getenv("BRANDBOOST_JPEG_QUALITY", "90"))
JPEG_BACKGROUND = os.getenv("BRANDBOOST_JPEG_BACKGROUND", "#FFFFFF")
DEFAULT_DOWNLOAD_NAME = os.getenv("BRANDBOOST_DOWNLOAD_NAME", "brandboost")
DOWNLOAD_SUFFIX = "-asset"

LOG_LEVEL = os.getenv("BRANDBOOST_LOG_LEVEL", "INFO").upper()

# Shown to the user for every generation failure.
GENERATION_FAILED_MESSAGE = "Could not generate the marketing asset. Please try again."

# Form sessions idle longer than this are discarded; the oldest idle one is
# evicted once the store is full.
SESSION_TTL_SECONDS = int(os.getenv("BRANDBOOST_SESSION_TTL", "1800"))
MAX_SESSIONS = int(os.getenv("BRANDBOOST_MAX_SESSIONS", "200"))
