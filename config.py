"""
config.py — Central configuration for the BetGuard mock betting backend.
All fraud thresholds, session settings, API and client parameters in one place.
Supports .env overrides via os.environ.
"""
import os
from pathlib import Path

from dotenv import load_dotenv

# ─── Paths ───────────────────────────────────────────────────────────
BASE_DIR = Path(__file__).parent
ENV_FILE = BASE_DIR / ".env"

load_dotenv(ENV_FILE)

# ─── Service identity ────────────────────────────────────────────────
SERVICE_NAME = "BetGuard Mock Betting API"
SERVICE_VERSION = "1.0.0"
ENVIRONMENT = os.environ.get("BETGUARD_ENV", "development")

# ─── Fraud categories ────────────────────────────────────────────────
FRAUD_TYPES = [
    "negative-amount",
    "odds-manipulation",
    "match-alteration",
    "timestamp-manipulation",
    "request-tampering",
]

FRAUD_REASONS = {
    "negative-amount":        "Invalid bet amount",
    "odds-manipulation":      "Suspicious odds manipulation",
    "match-alteration":       "Match ID tampering detected",
    "timestamp-manipulation": "Timestamp manipulation detected",
    "request-tampering":      "Unauthorized request fields",
}

FRAUD_ATTEMPT_FLAG = "fraud_attempt"

# ─── Fraud rule thresholds ───────────────────────────────────────────
MAX_ODDS = float(os.environ.get("BETGUARD_MAX_ODDS", "20"))
TAMPER_MARKER = "-altered"
TIMESTAMP_MAX_AGE_SECONDS = int(os.environ.get("BETGUARD_TIMESTAMP_MAX_AGE", "3600"))
UNAUTHORIZED_FIELDS = ("serverBypass", "adminApproval")

# "last": the last triggered rule in evaluation order is reported
# "first": the first triggered rule is reported
RULE_MATCH_POLICIES = ("last", "first")
RULE_MATCH_POLICY = os.environ.get("BETGUARD_RULE_POLICY", "last")

# ─── Account policy ──────────────────────────────────────────────────
FRAUD_BLOCK_THRESHOLD = int(os.environ.get("BETGUARD_BLOCK_THRESHOLD", "3"))
ACCOUNT_RESTRICTIONS = ["betting_restricted", "withdrawal_restricted"]

# ─── Required request fields ─────────────────────────────────────────
REGISTRATION_FIELDS = ("username", "email", "password")
BET_FIELDS = ("matchId", "amount", "odds", "selection")

# ─── Sessions ────────────────────────────────────────────────────────
# 0 disables expiry: tokens live for the lifetime of the process.
SESSION_TTL_SECONDS = int(os.environ.get("BETGUARD_SESSION_TTL", "0"))
TOKEN_BYTES = 32

# ─── API settings ────────────────────────────────────────────────────
API_HOST = os.environ.get("BETGUARD_HOST", "0.0.0.0")
API_PORT = int(os.environ.get("MOCK_SERVER_PORT", "3000"))

# ─── Probe client settings ───────────────────────────────────────────
API_BASE_URL = os.environ.get("API_BASE_URL", f"http://localhost:{API_PORT}")
API_TIMEOUT_S = float(os.environ.get("BETGUARD_API_TIMEOUT", "10"))
TIMESTAMP_BACKDATE_SECONDS = 86400

# ─── Retry / backoff ─────────────────────────────────────────────────
MAX_RETRIES = int(os.environ.get("MAX_RETRIES", "3"))
RETRY_BASE_DELAY_S = 1.0
RETRY_MAX_DELAY_S = 10.0
RETRY_JITTER_PCT = 0.1

# ─── Synthetic data ──────────────────────────────────────────────────
DATA_RANDOM_SEED = os.environ.get("BETGUARD_DATA_SEED")

SPORT_TEAMS = {
    "football":   ["Manchester United", "Liverpool", "Barcelona", "Real Madrid", "Bayern Munich"],
    "basketball": ["Lakers", "Celtics", "Bulls", "Heat", "Warriors"],
    "tennis":     ["Nadal", "Djokovic", "Federer", "Murray", "Williams"],
    "baseball":   ["Yankees", "Red Sox", "Cubs", "Dodgers", "Giants"],
    "hockey":     ["Canadiens", "Maple Leafs", "Bruins", "Blackhawks", "Red Wings"],
}
BET_TYPES = ["single", "accumulator", "system"]
MARKET_TYPES = ["winner", "total_goals", "both_teams_to_score", "handicap"]
SELECTIONS = ["home", "away", "draw", "over", "under", "yes", "no"]

# ─── Logging ──────────────────────────────────────────────────────────
import logging

LOG_LEVEL = os.environ.get("BETGUARD_LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s | %(name)-18s | %(levelname)-7s | %(message)s"

def get_logger(name: str) -> logging.Logger:
    """Get a configured logger for the given module name."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(getattr(logging, LOG_LEVEL.upper(), logging.INFO))
    return logger
