import os
from dotenv import load_dotenv

load_dotenv()

APP_VERSION = os.getenv("APP_VERSION", "1.0.0")

LOG_LEVEL_FROM_ENV = os.getenv("LOG_LEVEL", "INFO").upper()

# ===== OpenAI (speaking analysis) =====
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_API_BASE_URL = os.getenv("OPENAI_API_BASE_URL", "https://api.openai.com")
OPENAI_RESPONSES_PATH = os.getenv("OPENAI_RESPONSES_PATH", "/v1/responses")
DEFAULT_ANALYSIS_MODEL = os.getenv("DEFAULT_ANALYSIS_MODEL", "gpt-4o-mini")

# ===== Azure Speech (pronunciation assessment) =====
AZURE_SPEECH_REGION = os.getenv("AZURE_SPEECH_REGION")
AZURE_SPEECH_KEY = os.getenv("AZURE_SPEECH_KEY")
PRONUNCIATION_LANGUAGE = os.getenv("PRONUNCIATION_LANGUAGE", "en-US")

# Whole request body is buffered in memory before decoding
MAX_UPLOAD_SIZE_MB = int(os.getenv("MAX_UPLOAD_SIZE_MB", "20"))

API_TIMEOUT = int(os.getenv("API_TIMEOUT", "600"))
READ_TIMEOUT = float(os.getenv("READ_TIMEOUT", "60.0"))
MAX_CONNECTIONS = int(os.getenv("MAX_CONNECTIONS", "100"))

CORS_ALLOW_ORIGINS = [
    origin.strip() for origin in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",") if origin.strip()
]
