import os

DATABASE_URL = os.getenv("DATABASE_URL", "postgresql+psycopg2://postgres:postgres@db:5432/rc_match")

JWT_SECRET = os.getenv("JWT_SECRET", "")
ACCESS_TOKEN_TTL_MINUTES = int(os.getenv("ACCESS_TOKEN_TTL_MINUTES", "720"))
DEV_MODE = os.getenv("DEV_MODE", "false").lower() == "true"
SESSION_COOKIE_NAME = "rc_session"

ADMIN_BOOTSTRAP_USERNAME = os.getenv("ADMIN_BOOTSTRAP_USERNAME", "admin").strip().lower()
ADMIN_BOOTSTRAP_PASSWORD = os.getenv("ADMIN_BOOTSTRAP_PASSWORD", "")

MESSAGE_MAX_LENGTH = int(os.getenv("MESSAGE_MAX_LENGTH", "2000"))
CONVERSATION_POLL_SECONDS = int(os.getenv("CONVERSATION_POLL_SECONDS", "3"))

_default_origins = "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173"
CORS_ALLOWED_ORIGINS = [o.strip() for o in os.getenv("CORS_ALLOWED_ORIGINS", _default_origins).split(",") if o.strip()]

RL_AUTH_REGISTER_LIMIT = int(os.getenv("RL_AUTH_REGISTER_LIMIT", "100"))
RL_AUTH_LOGIN_LIMIT = int(os.getenv("RL_AUTH_LOGIN_LIMIT", "100"))
RL_SWIPE_LIMIT = int(os.getenv("RL_SWIPE_LIMIT", "300"))
RL_MESSAGE_LIMIT = int(os.getenv("RL_MESSAGE_LIMIT", "120"))
RL_WINDOW_SECONDS = int(os.getenv("RL_WINDOW_SECONDS", "60"))
