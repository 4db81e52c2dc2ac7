import os
from pathlib import Path
from dotenv import load_dotenv

# .env carries DISCORD_WEBHOOK_URL and directory overrides; load it before anything reads ENV.
load_dotenv()

# Repository root, so scripts behave the same from any working directory.
PROJECT_ROOT = Path(__file__).resolve().parents[3]


def resolve_dir(env_key: str, default: str) -> Path:
    """
    Directory from ENV (``default`` when unset), created on first use.
    Relative values are anchored at PROJECT_ROOT.
    """
    path = Path(os.getenv(env_key) or default)
    if not path.is_absolute():
        path = PROJECT_ROOT / path
    path.mkdir(parents=True, exist_ok=True)
    return path


# OAuth client secrets and the cached user token.
SECRETS_DIR = resolve_dir("MORNING_SECRETARY_SECRETS_DIR", "secrets")
# Briefing config and the date-keyed report log.
STATE_DIR = resolve_dir("MORNING_SECRETARY_STATE_DIR", ".state")
LOGS_DIR = resolve_dir("MORNING_SECRETARY_LOGS_DIR", "logs")

CREDENTIALS_PATH = SECRETS_DIR / "credentials.json"
TOKEN_PATH = SECRETS_DIR / "google_token.json"

CONFIG_PATH = STATE_DIR / "config.json"
REPORTS_PATH = STATE_DIR / "morning-reports.json"
