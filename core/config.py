import os
import logging

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"
DEV_SECRET = "dev-secret"


def database_url() -> str:
    url = os.environ.get("DATABASE_URL")
    if url:
        return url
    host = os.environ.get("POSTGRES_HOST") or "localhost"
    db = os.environ.get("POSTGRES_DB") or "lamiere"
    user = os.environ.get("POSTGRES_USER") or "postgres"
    password = os.environ.get("POSTGRES_PASSWORD") or "postgres"
    port = os.environ.get("POSTGRES_PORT") or "5432"
    return f"postgresql+psycopg2://{user}:{password}@{host}:{port}/{db}"


def jwt_secret() -> bytes:
    s = os.environ.get("JWT_SECRET") or os.environ.get("AUTH_SECRET") or os.environ.get("SECRET_KEY")
    if not s:
        logger.warning("JWT_SECRET not set, signing tokens with the development secret")
        s = DEV_SECRET
    return s.encode("utf-8")


def jwt_algorithm() -> str:
    return os.environ.get("JWT_ALG") or "HS256"


def jwt_maxage() -> int:
    """Session lifetime in seconds (JWT_MAXAGE is given in minutes)."""
    return int(os.environ.get("JWT_MAXAGE") or 60) * 60


def inventory_url() -> str:
    url = os.environ.get("INVENTORY_DATABASE_URL")
    if url:
        return url
    host = os.environ.get("SQLSERVER_HOSTNAME") or "localhost"
    port = os.environ.get("SQLSERVER_PORT") or "1433"
    user = os.environ.get("SQLSERVER_USERNAME") or "sa"
    password = os.environ.get("SQLSERVER_PASSWORD") or ""
    return f"mssql+pymssql://{user}:{password}@{host}:{port}"


def inventory_view() -> str:
    return os.environ.get("INVENTORY_VIEW") or "SRLMAZZ_LANTEK.dbo.VGiacenzaLamiere"


def inventory_tenant_column() -> str:
    return os.environ.get("INVENTORY_TENANT_COLUMN") or "Udata1"


def inventory_lock_timeout() -> float:
    return float(os.environ.get("INVENTORY_LOCK_TIMEOUT") or 10)


def inventory_query_timeout() -> int:
    return int(os.environ.get("INVENTORY_QUERY_TIMEOUT") or 30)


def cors_origins() -> list[str]:
    raw = os.environ.get("CORS_ORIGIN_VALUE") or "http://localhost:3000"
    return [o.strip() for o in raw.split(",") if o.strip()]


def static_dir() -> str:
    return os.environ.get("STATIC_DIR") or "./html"


def log_level() -> str:
    return (os.environ.get("LOG_LEVEL") or "INFO").upper()
