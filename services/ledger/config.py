"""
Growth Ledger Configuration
===========================

All settings come from environment variables, read once at import.

Author: Growth Ledger Team
"""
import os

# Persistence
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./growth_ledger.db")

# Resource economy
SOIL_CAPACITY = int(os.getenv("SOIL_CAPACITY", "100"))
SUN_CAPACITY = int(os.getenv("SUN_CAPACITY", "3"))

# Sprout end dates are pinned to this UTC hour so they display stably
END_DATE_ANCHOR_HOUR = int(os.getenv("END_DATE_ANCHOR_HOUR", "15"))

# Debug time override: shifts the system clock by N days
DEBUG_TIME_OFFSET_DAYS = float(os.getenv("DEBUG_TIME_OFFSET_DAYS", "0"))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE") or None
JSON_LOGS = os.getenv("JSON_LOGS", "false").lower() in ("1", "true", "yes")

# Scheduling
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://localhost:6379/1")
SUN_REPLENISH_CHECK_MINUTES = int(os.getenv("SUN_REPLENISH_CHECK_MINUTES", "60"))

# HTTP
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
    if origin.strip()
]

# Optional prompt pool file (one prompt per line, '#' comments)
SUN_PROMPTS_FILE = os.getenv("SUN_PROMPTS_FILE") or None

DEFAULT_SUN_PROMPTS = [
    "What did this part of your life ask of you this week?",
    "Where did you feel the most growth here, and why?",
    "What would you tell yourself from a week ago?",
    "What is quietly thriving that you have not noticed?",
    "What needs less of your attention right now?",
    "Which small habit carried the most weight this week?",
    "What are you avoiding in this area of your life?",
    "What would make next week feel lighter here?",
    "Who helped you grow here, and have you told them?",
]
