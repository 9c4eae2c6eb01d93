"""Application configuration with sensible defaults."""
import os
from pathlib import Path

# Optional YAML knowledge base; the built-in corpus is used when unset
_corpus_path = os.getenv("CORPUS_PATH", "").strip()
CORPUS_PATH = Path(_corpus_path) if _corpus_path else None

# Gemini generation service
GEMINI_BASE_URL = os.getenv(
    "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
)
GENERATION_MODEL = os.getenv("GENERATION_MODEL", "gemini-2.5-flash-preview-05-20")
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "").strip()
GENERATION_TIMEOUT = float(os.getenv("GENERATION_TIMEOUT", "60.0"))

# Fixed sampling parameter, not configurable at runtime
GENERATION_TEMPERATURE = 0.7

# Chat input limits
MAX_QUERY_LENGTH = int(os.getenv("MAX_QUERY_LENGTH", "2000"))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "json")  # json or console
