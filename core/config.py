import os

from dotenv import load_dotenv

# Load environment variables from .env file, if it exists
load_dotenv()

# CORS origins (dev + production)
DEV_DOMAIN = os.getenv("DEV_DOMAIN", "http://localhost:3000")
PRODUCTION_DOMAIN = os.getenv("PRODUCTION_DOMAIN")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Timezone used to bucket shifts by local hour / calendar day on the dashboard
APP_TIMEZONE = os.getenv("APP_TIMEZONE", "UTC")

# Dashboard defaults
DASHBOARD_DAYS = int(os.getenv("DASHBOARD_DAYS", "7"))
TOP_WORKERS_LIMIT = int(os.getenv("TOP_WORKERS_LIMIT", "5"))

# Key of the one authoritative perimeter row
PERIMETER_SCOPE = os.getenv("PERIMETER_SCOPE", "default")


def build_database_url() -> str:
    """
    Resolve the database URL.

    DATABASE_URL wins when set. Otherwise the URL is assembled from the
    DB_* variables (Cloud SQL socket when INSTANCE_CONNECTION_NAME is set,
    plain TCP otherwise). With nothing configured we fall back to a local
    SQLite file so the app can boot for development.
    """
    explicit = os.getenv("DATABASE_URL")
    if explicit:
        return explicit

    db_host = os.getenv("DB_HOST")
    db_port = os.getenv("DB_PORT", "5432")
    db_name = os.getenv("DB_NAME")
    db_user = os.getenv("DB_USER")
    db_password = os.getenv("DB_PASSWORD")
    instance_connection_name = os.getenv("INSTANCE_CONNECTION_NAME")

    if instance_connection_name:
        required = ["DB_NAME", "DB_USER", "DB_PASSWORD"]
        missing = [var for var in required if not os.getenv(var)]
        if missing:
            raise ValueError(
                f"Missing required environment variables for Cloud SQL (socket): {', '.join(missing)}"
            )
        return (
            f"postgresql+psycopg2://{db_user}:{db_password}@/{db_name}"
            f"?host=/cloudsql/{instance_connection_name}"
        )

    if db_host:
        required = ["DB_NAME", "DB_USER", "DB_PASSWORD"]
        missing = [var for var in required if not os.getenv(var)]
        if missing:
            raise ValueError(
                f"Missing required environment variables for TCP: {', '.join(missing)}"
            )
        return f"postgresql+psycopg2://{db_user}:{db_password}@{db_host}:{db_port}/{db_name}"

    return "sqlite:///./timeclock.db"


DATABASE_URL = build_database_url()


def allowed_origins() -> list[str]:
    origins = [
        DEV_DOMAIN,
        PRODUCTION_DOMAIN,
        "http://127.0.0.1:3000",
    ]
    # Remove any None values and duplicates
    return sorted(set(origin for origin in origins if origin))
