import os
import tempfile

# ✅ Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./resume_scanner.db")
RUN_MIGRATIONS = os.getenv("RUN_MIGRATIONS", "0") == "1"

# ✅ Security
SECRET_KEY = os.getenv("SECRET_KEY", "secret")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "6000"))

# ✅ OpenAI
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
# Tried in order until one answers without a quota error
AI_MODELS = [
    m.strip()
    for m in os.getenv("AI_MODELS", "gpt-4o,gpt-4o-mini,gpt-3.5-turbo").split(",")
    if m.strip()
]
MAX_RESUME_CHARS = 15000
AI_TIMEOUT_SECONDS = float(os.getenv("AI_TIMEOUT_SECONDS", "60"))

# ✅ Server
PORT = int(os.getenv("PORT", "5001"))
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
IS_SERVERLESS = bool(os.getenv("VERCEL")) or ENVIRONMENT == "production"
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# ✅ Uploads (serverless filesystems are only writable under the temp dir)
UPLOAD_DIR = tempfile.gettempdir() if IS_SERVERLESS else os.getenv("UPLOAD_DIR", "uploads")
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", "5000000"))

# ✅ Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = os.getenv("LOG_DIR", "logs")
