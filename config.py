import os

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./streaming.db")
SECRET_KEY = os.getenv("SECRET_KEY", "secret_key_for_testing_purposes")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

# Calendar days in analytics are bucketed in this zone
ANALYTICS_TIMEZONE = os.getenv("ANALYTICS_TIMEZONE", "UTC")

CLIENT_URL = os.getenv("CLIENT_URL", "*")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
DEBUG = os.getenv("DEBUG", "false").lower() in ("1", "true", "yes")

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))
