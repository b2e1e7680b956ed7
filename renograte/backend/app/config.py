from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # --- Runtime ---
    ENV: str = "dev"  # dev|prod
    LOG_LEVEL: str = "INFO"
    RENOGRATE_DB_URL: str = "sqlite+aiosqlite:///./renograte.db"

    # --- Minimal B2B Auth (API key) ---
    # Send: X-API-Key: <key>
    API_KEY: str | None = None

    # Public site; sent upstream as Origin/Referer and used to build full signing URLs
    APP_URL: str = "https://www.renograte.com"

    # --- RealtyFeed (RESO Web API behind OAuth client credentials) ---
    REALTYFEED_CLIENT_ID: str | None = None
    REALTYFEED_CLIENT_SECRET: str | None = None
    REALTYFEED_API_KEY: str | None = None
    REALTYFEED_AUTH_URL: str = "https://api.realtyfeed.com/v1/auth/token"
    REALTYFEED_API_URL: str = "https://api.realtyfeed.com/reso/odata/"
    REALTYFEED_TIMEOUT_S: float = 15.0
    REALTYFEED_AUTH_TIMEOUT_S: float = 30.0

    # --- Google Places (geocoding + place details) ---
    GOOGLE_MAPS_API_KEY: str | None = None
    GOOGLE_PLACES_BASE_URL: str = "https://places.googleapis.com/v1"
    GOOGLE_PLACES_TIMEOUT_S: float = 20.0
    PLACES_CACHE_TTL_S: int = 3600

    # --- In-process cache ---
    CACHE_MAX_ENTRIES: int = 1000
    CACHE_DEFAULT_TTL_S: int = 300

    # --- Contract signing ---
    SIGNING_TOKEN_TTL_DAYS: int = 7


settings = Settings()
