import os

from dotenv import load_dotenv

load_dotenv(".env.local")

# ENV variables
API_URL = os.getenv("API_URL", "http://localhost:8000")
WEBAPP_URL = os.getenv("WEBAPP_URL", "http://localhost:5173")
IS_DEV = os.getenv("IS_DEV", "true").lower() in ("true", "1", "yes")


# JWT configuration
JWT_SECRET = os.getenv("JWT_SECRET", "hangout_dev_secret_change_me_in_production")
JWT_AUDIENCE = os.getenv("JWT_AUDIENCE", "hangout-app")
JWT_ISSUER = os.getenv("JWT_ISSUER", "hangout-auth")


# Cookie configuration
COOKIE_NAME = os.getenv("COOKIE_NAME", "hangout_access_token")

# Database configuration
DATABASE_URL = os.getenv("DATABASE_URL")
MIGRATIONS_DIR = os.path.join(os.path.dirname(__file__), "..", "database", "sql")

# Social graph configuration
MAX_FIRST_DEGREE_FRIENDS = int(os.getenv("MAX_FIRST_DEGREE_FRIENDS", "5"))

# Hangout lifecycle configuration
ALLOW_CANCEL_CONFIRMED = os.getenv("ALLOW_CANCEL_CONFIRMED", "true").lower() in (
    "true",
    "1",
    "yes",
)
