from dotenv import load_dotenv
import os

load_dotenv()

EIA_API_URL = os.getenv(
    "EIA_API_URL",
    "https://api.eia.gov/v2/electricity/electric-power-operational-data/data",
)
EIA_API_KEY = os.getenv("EIA_API_KEY", "")
EIA_TIMEOUT_SECONDS = float(os.getenv("EIA_TIMEOUT_SECONDS", "30"))


def _default_database_url() -> str:
    user = os.getenv("DB_USER", "postgres")
    password = os.getenv("DB_PASSWORD", "")
    host = os.getenv("DB_HOST", "localhost")
    port = os.getenv("DB_PORT", "5433")
    name = os.getenv("DB_NAME", "energy_db")
    return f"postgresql+psycopg2://{user}:{password}@{host}:{port}/{name}"


DATABASE_URL = os.getenv("DATABASE_URL") or _default_database_url()

CACHE_REFRESH = os.getenv("CACHE_REFRESH", "never")  # never | ttl
CACHE_TTL_HOURS = float(os.getenv("CACHE_TTL_HOURS", "24"))

WARM_REGIONS = [r.strip() for r in os.getenv("WARM_REGIONS", "").split(",") if r.strip()]
WARM_INTERVAL_MINUTES = int(os.getenv("WARM_INTERVAL_MINUTES", "60"))

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
PORT = int(os.getenv("PORT", "5000"))

DEFAULT_STATE = "US-TOTAL"
CACHE_WINDOW = 100
UPSTREAM_PAGE_SIZE = 50
FORECAST_HORIZON = 5
RENEWABLE_FUEL_TYPES = ("WND", "SUN")
