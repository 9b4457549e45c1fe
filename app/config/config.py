from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import make_url
from functools import lru_cache


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Database
    DATABASE_URL: str
    DATABASE_LOCAL_URL: str | None = None

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    APP_ENV: str = Field(
        default="development",
        validation_alias=AliasChoices("APP_ENV", "NODE_ENV"),
    )

    # API
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_DAYS: int = 1
    SECURE_COOKIES: bool = True
    BCRYPT_ROUNDS: int = 12
    DEBUG: bool = False

    @property
    def is_production(self) -> bool:
        return self.APP_ENV.strip().lower() == "production"

    @property
    def async_database_url(self) -> str:
        """URL of the database with the async driver filled in"""
        url = make_url(self.DATABASE_LOCAL_URL or self.DATABASE_URL)
        if url.drivername in ("postgres", "postgresql"):
            url = url.set(drivername="postgresql+asyncpg")
            # asyncpg knows `ssl`, not libpq's `sslmode`
            if "sslmode" in url.query:
                sslmode = url.query["sslmode"]
                url = url.difference_update_query(["sslmode"]).update_query_dict({"ssl": sslmode})
        return url.render_as_string(hide_password=False)

    @classmethod
    def for_testing(cls, **overrides):
        """Build settings for tests without reading the environment"""
        values = {
            "DATABASE_URL": "sqlite+aiosqlite:///:memory:",
            "SECRET_KEY": "test_secret_key",
            "BCRYPT_ROUNDS": 4,
            "_env_file": None,
        }
        values.update(overrides)
        return cls(**values)


@lru_cache()
def get_settings():
    return Settings()
