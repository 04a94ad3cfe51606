# robust .env loading
import os
from pathlib import Path
try:
    from dotenv import load_dotenv  # type: ignore
    # 1) load from CWD (project root when you run commands there)
    load_dotenv(override=False)
    # 2) also try repo root even if code runs from src/
    repo_root = Path(__file__).resolve().parents[2]
    env_path = repo_root / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=True)
except ImportError:
    pass

REPO_ROOT = Path(__file__).resolve().parents[2]


def _int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


def _float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


# --- Flask / server ---
SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
FLASK_ENV = os.getenv("FLASK_ENV", "production")
CORS_ORIGINS = os.getenv(
    "CORS_ORIGINS",
    "https://golden-frangollo-580ffa.netlify.app,http://localhost:5173,http://localhost:3000",
)
HOST = os.getenv("HOST", "0.0.0.0")
PORT = _int("PORT", 5000)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# JSON / form bodies; the photo itself has its own, lower limit
MAX_CONTENT_LENGTH = _int("MAX_CONTENT_LENGTH", 10 * 1024 * 1024)

# --- MongoDB ---
MONGODB_URI = os.getenv("MONGODB_URI")
MONGO_DB = os.getenv("MONGO_DB", "event_registration")
MONGO_SERVER_SELECTION_TIMEOUT_MS = _int("MONGO_SERVER_SELECTION_TIMEOUT_MS", 5000)
MONGO_CONNECT_TIMEOUT_MS = _int("MONGO_CONNECT_TIMEOUT_MS", 10000)
MONGO_SOCKET_TIMEOUT_MS = _int("MONGO_SOCKET_TIMEOUT_MS", 45000)
# per-call cap on the health check ping, seconds
HEALTH_PING_TIMEOUT = _float("HEALTH_PING_TIMEOUT", 1.0)

# startup retry; 0 attempts = keep trying forever
MONGO_RETRY_ATTEMPTS = _int("MONGO_RETRY_ATTEMPTS", 0)
MONGO_RETRY_DELAY = _float("MONGO_RETRY_DELAY", 1.0)
MONGO_RETRY_MAX_DELAY = _float("MONGO_RETRY_MAX_DELAY", 30.0)

REGISTRATIONS_COLLECTION = os.getenv("REGISTRATIONS_COLLECTION", "registrations")

# --- Uploads ---
UPLOAD_DIR = os.getenv("UPLOAD_DIR", str(REPO_ROOT / "uploads"))
MAX_UPLOAD_BYTES = _int("MAX_UPLOAD_BYTES", 5 * 1024 * 1024)
ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/png", "image/jpg")
UPLOAD_FIELD = "idPhoto"

# --- Admin ---
# Placeholder shared secret, compared against the `admin-auth` request header.
ADMIN_AUTH_HEADER = "admin-auth"
ADMIN_AUTH_VALUE = os.getenv("ADMIN_AUTH_VALUE", "true")


def cors_origins() -> list:
    raw = CORS_ORIGINS.strip()
    if raw == "*":
        return ["*"]
    return [o.strip() for o in raw.split(",") if o.strip()]
