import os

DATABASE_URL = os.getenv("DATABASE_URL", "postgresql+psycopg2://postgres:postgres@db:5432/pairwise_match")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "")
ANALYSIS_MODEL = os.getenv("ANALYSIS_MODEL", "gpt-4o-mini")
ANALYSIS_TEMPERATURE = float(os.getenv("ANALYSIS_TEMPERATURE", "0.3"))
ANALYSIS_MAX_TOKENS = int(os.getenv("ANALYSIS_MAX_TOKENS", "4000"))
ANALYSIS_MAX_ATTEMPTS = int(os.getenv("ANALYSIS_MAX_ATTEMPTS", "3"))
ANALYSIS_RETRY_MIN_SECONDS = float(os.getenv("ANALYSIS_RETRY_MIN_SECONDS", "1"))
ANALYSIS_RETRY_MAX_SECONDS = float(os.getenv("ANALYSIS_RETRY_MAX_SECONDS", "30"))

FANOUT_CONCURRENCY = int(os.getenv("FANOUT_CONCURRENCY", "4"))

# Product has not signed off on the production window; one hour until they do.
REGENERATE_PROFILE_COOLDOWN_SECONDS = int(os.getenv("REGENERATE_PROFILE_COOLDOWN_SECONDS", "3600"))

MATCH_LIST_DEFAULT_LIMIT = int(os.getenv("MATCH_LIST_DEFAULT_LIMIT", "30"))
MATCH_LIST_MAX_LIMIT = int(os.getenv("MATCH_LIST_MAX_LIMIT", "100"))
