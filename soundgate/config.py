"""Configuration: env, storage layout, upload limits, default quotas."""
import os
from pathlib import Path

from dotenv import load_dotenv

# Base paths (project root = parent of soundgate package)
BASE_DIR = Path(__file__).resolve().parent.parent

# Load .env from project root so SOUNDGATE_DATA_DIR etc. are set
load_dotenv(BASE_DIR / ".env")

DATA_DIR = Path(os.getenv("SOUNDGATE_DATA_DIR", str(BASE_DIR / "data")))
META_DIR = DATA_DIR / "meta"
PENDING_DIR = DATA_DIR / "pending"
MUSIC_DIR = DATA_DIR / "music"
USERS_DIR = DATA_DIR / "users"
ACTIVITY_LOG_PATH = DATA_DIR / "activity.log"

# API
API_HOST = os.getenv("SOUNDGATE_API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("SOUNDGATE_API_PORT", "4000"))
LOG_LEVEL = os.getenv("SOUNDGATE_LOG_LEVEL", "INFO").upper()

# Uploads
MAX_UPLOAD_BYTES = int(os.getenv("SOUNDGATE_MAX_UPLOAD_MB", "200")) * 1024 * 1024
UPLOAD_CHUNK_BYTES = 1024 * 1024
ALLOWED_MIME_TYPES = frozenset(
    {
        "audio/mpeg",
        "audio/wav",
        "audio/x-wav",
        "audio/flac",
        "audio/x-flac",
        "audio/aac",
        "audio/ogg",
        "audio/x-m4a",
        "audio/mp4",
    }
)
DEFAULT_ALBUM = "Singles"
DEFAULT_EXTENSION = ".mp3"

# Streaming
STREAM_CHUNK_BYTES = int(os.getenv("SOUNDGATE_STREAM_CHUNK_BYTES", "65536"))

# Default quotas for accounts whose file omits them
DEFAULT_MAX_PENDING_TRACKS = 5
DEFAULT_MAX_STORAGE_MB = 1024

# Activity log rotation (1 MiB x 5 files)
ACTIVITY_LOG_MAX_BYTES = 1024 * 1024
ACTIVITY_LOG_BACKUPS = 5

# Compare metadata against files on startup and repair drift
RECONCILE_ON_STARTUP = os.getenv("SOUNDGATE_RECONCILE_ON_STARTUP", "1").lower() in ("1", "true", "yes")


def ensure_data_dirs() -> None:
    for d in (DATA_DIR, META_DIR, PENDING_DIR, MUSIC_DIR, USERS_DIR):
        d.mkdir(parents=True, exist_ok=True)
