from pydantic_settings import BaseSettings
from typing import Optional, Set
from pydantic import Field

class Settings(BaseSettings):
    SECRET_KEY: str = Field("change-me-in-production")
    ALGORITHM: str = Field("HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(30)

    DATABASE_URL: Optional[str] = None
    SQLALCHEMY_DATABASE_URL: Optional[str] = None
    DB_ECHO: bool = Field(False)

    # Comma-separated role names allowed to trigger refreshes.
    ADMIN_ROLES: Optional[str] = "admin"

    DEFAULT_PERIOD: str = Field("trimester")
    REFRESH_CHUNK_SIZE: int = Field(5, ge=1)
    SNAPSHOT_HISTORY_LIMIT: int = Field(6, ge=1)
    # Lower bound on the scoring participation rate once a window holds 3+ activities.
    MIN_SCORING_RATE: float = Field(0.0, ge=0.0, le=1.0)

    model_config = {
        "env_file": ".env",
        "extra": "allow",
    }

    @property
    def effective_database_url(self) -> str:
        return self.SQLALCHEMY_DATABASE_URL or self.DATABASE_URL or "sqlite+aiosqlite:///./jps.db"

    @property
    def admin_roles(self) -> Set[str]:
        """
        Returns the lower-cased role names treated as administrators.
        An empty setting means nobody is an admin.
        """
        if not self.ADMIN_ROLES:
            return set()
        return {role.strip().lower() for role in self.ADMIN_ROLES.split(",") if role.strip()}

settings = Settings()
