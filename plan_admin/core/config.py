# plan_admin/core/config.py
from dotenv import load_dotenv
import os

# Load .env before reading any setting
load_dotenv()

# Session tokens issued by this service
SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60))

# ID tokens issued by the external identity provider
IDP_SECRET = os.getenv("IDP_SECRET", "dev-idp-secret")
IDP_ALGORITHM = os.getenv("IDP_ALGORITHM", "HS256")
IDP_AUDIENCE = os.getenv("IDP_AUDIENCE") or None

# Document store
STORE_BACKEND = os.getenv("STORE_BACKEND", "sql")
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./plan_admin.db")
BATCH_DELETE_LIMIT = int(os.getenv("BATCH_DELETE_LIMIT", 500))
MIGRATION_PAGE_SIZE = int(os.getenv("MIGRATION_PAGE_SIZE", 200))

# Plan import
IMPORT_MAX_BYTES = int(os.getenv("IMPORT_MAX_BYTES", 1024 * 1024))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
