"""Application settings read once from the environment at startup."""
import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict


class Settings(BaseModel):
    """Immutable runtime configuration"""
    model_config = ConfigDict(frozen=True)

    secret_key: str
    database_url: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    host: str = "0.0.0.0"
    port: int = 8000
    client_origin: str = "http://localhost:3000"
    upload_dir: str = "uploads"
    environment: str = "development"
    log_level: str = "INFO"
    log_file: str = "app.log"
    sql_echo: bool = False

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def load_settings() -> Settings:
    """Build Settings from the process environment and an optional .env file"""
    load_dotenv()

    secret_key = os.getenv("SECRET_KEY")
    if not secret_key:
        raise ValueError("SECRET_KEY environment variable not set!")

    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        raise ValueError("DATABASE_URL environment variable not set!")

    return Settings(
        secret_key=secret_key,
        database_url=database_url,
        algorithm=os.getenv("ALGORITHM", "HS256"),
        access_token_expire_minutes=int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60")),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        client_origin=os.getenv("CLIENT_ORIGIN", "http://localhost:3000"),
        upload_dir=os.getenv("UPLOAD_DIR", "uploads"),
        environment=os.getenv("ENVIRONMENT", "development"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_file=os.getenv("LOG_FILE", "app.log"),
        sql_echo=_env_flag("SQL_ECHO"),
    )
