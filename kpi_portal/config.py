"""
Application configuration settings.
"""
import os
from pathlib import Path

# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent

# Load .env file if it exists (for local development)
env_file = BASE_DIR / ".env"
if env_file.exists():
    with open(env_file) as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith('#') and '=' in line:
                key, value = line.split('=', 1)
                os.environ.setdefault(key.strip(), value.strip())

# Database - SQLite file locally, managed PostgreSQL when DATABASE_URL is set
DATABASE_URL = os.getenv("DATABASE_URL", "")
DATABASE_PATH = Path(os.getenv("DATABASE_PATH", str(BASE_DIR / "kpi_portal.db")))

# Determine if using PostgreSQL
USE_POSTGRES = DATABASE_URL.startswith("postgres")

# Hosted providers hand out postgres:// but psycopg2 needs postgresql://
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Chat assistant (any OpenAI-compatible chat completions endpoint)
CHAT_API_URL = os.getenv("CHAT_API_URL", "https://api.deepseek.com/v1/chat/completions")
CHAT_API_KEY = os.getenv("CHAT_API_KEY", "")
CHAT_MODEL = os.getenv("CHAT_MODEL", "deepseek-chat")
CHAT_TEMPERATURE = float(os.getenv("CHAT_TEMPERATURE", "0.1"))
CHAT_MAX_TOKENS = int(os.getenv("CHAT_MAX_TOKENS", "2000"))
CHAT_TIMEOUT_SECONDS = 60

# File paths
TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

# Departments
DEPARTMENTS = [
    "Grafico",
    "Sales",
    "Financial",
    "Agency",
    "PM Company",
    "Marketing",
]

# Objective aggregation types
OBJECTIVE_TYPES = [
    "Cumulativo",    # sum of monthly values
    "Mantenimento",  # average of monthly values
    "Ultimo mese",   # latest recorded month only
]

# Display formats for values and targets
NUMBER_FORMATS = ["number", "currency", "percentage", "decimal"]

# Progress thresholds
ON_TRACK_THRESHOLD = 70.0
# Reverse logic: an overage of 50% of |target| drops progress to zero
REVERSE_OVERAGE_RATIO = 0.5

# Accepted range for recorded values
VALUE_YEAR_MIN = 2020
VALUE_YEAR_MAX = 2030

MONTH_NAMES = [
    "Gennaio", "Febbraio", "Marzo", "Aprile", "Maggio", "Giugno",
    "Luglio", "Agosto", "Settembre", "Ottobre", "Novembre", "Dicembre",
]
