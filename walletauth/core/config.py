from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv(override=False)

class Settings(BaseSettings):
    PROJECT_NAME: str = "WalletAuth"
    # Application settings
    PORT: int = 5000
    HOST: str = "127.0.0.1"
    VERSION: str = "0.1.0"
    CORS_ORIGINS: str = "*"

    # SSL settings
    SSL_KEY: str | None = None
    SSL_CERT: str | None = None

    # SQLAlchemy database URL
    DATABASE_URL: str = "sqlite:///./wallet_auth.db"
    DB_CONNECT_TIMEOUT: int = 30

    # Login configuration
    ENCODE_KEY: str | None = None
    ENCODE_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_SECONDS: int = 7 * 24 * 3600 # 7 days
    NONCE_NUM_BYTES: int = 32 # 64 hex characters
    LOGIN_MESSAGE_PREFIX: str = "Login nonce: "
    LINK_MESSAGE_PREFIX: str = "Link wallet nonce: "

    # Debug settings
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

# Instantiate the settings
settings = Settings()
