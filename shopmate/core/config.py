from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    OPENAI_API_KEY: str | None = None

    OPENAI_MODEL_VISION: str = "gpt-4o"
    OPENAI_MODEL_CHAT: str = "gpt-4o-mini"
    OPENAI_MODEL_EXTRACT: str = "gpt-4o-mini"
    OPENAI_MODEL_EMBEDDING: str = "text-embedding-3-small"

    OPENAI_TEMPERATURE_VISION: float = 0.0
    OPENAI_TEMPERATURE_CHAT: float = 0.4
    OPENAI_TEMPERATURE_EXTRACT: float = 0.0

    MATCH_MODE: str = "keywords"  # "keywords" | "category" | "embedding"
    MATCH_THRESHOLD: float = 0.8
    MATCH_COUNT: int = 1

    SUPABASE_URL: str | None = None
    SUPABASE_KEY: str | None = None
    SUPABASE_SERVICE_KEY: str | None = None
    CATALOG_SEED_PATH: str = "./data/products.json"

    SESSION_STORE: str = "memory"  # "memory" | "json"
    SESSION_DATA_DIR: str = "./data/sessions"
    SESSION_TTL_SECONDS: int = 60 * 60 * 24

    ASSISTANT_NAME: str = "ShopMate"
    ASSISTANT_LANGUAGE: str = "Bengali (Bangla)"
    ASSISTANT_TONE: str = "Warm, respectful, highly professional. Use a few friendly emojis."
    CURRENCY: str = "BDT"

    META_VERIFY_TOKEN: str = ""
    META_APP_SECRET: str | None = None
    META_PAGE_ACCESS_TOKEN: str | None = None
    META_SEND_ENDPOINT: str = "https://graph.facebook.com/v19.0/me/messages"
    AUTO_REPLY_ENABLED: bool = False

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"


settings = Settings()
