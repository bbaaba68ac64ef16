import os
import secrets
from dotenv import load_dotenv

# Load environment variables from .env file if it exists
load_dotenv()

def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() not in ("0", "false", "no", "off", "")

# Security Configuration
SESSION_SECRET = os.getenv("SESSION_SECRET", secrets.token_hex(32))
ORIGIN = os.getenv("ORIGIN", "http://localhost:8000")

# Tree Configuration
TREES_DIR = os.getenv("TREES_DIR", os.path.join(os.getcwd(), "data", "trees"))
VALIDATE_ON_LOAD = _env_flag("VALIDATE_ON_LOAD", True)

# Application Configuration
MAX_SESSIONS = int(os.getenv("MAX_SESSIONS", "1000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "NONE").upper()
