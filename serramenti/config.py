from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./serramenti.db"
    COMPANY_NAME: str = "Serramenti"
    LOG_LEVEL: str = "INFO"

    # Grid generation
    DEFAULT_INCREMENT: float = 10.0  # cm, both axes
    MAX_GRID_CELLS: int = 10000

    # Seed default frame types and profiles on startup (skips existing rows)
    AUTO_SEED: bool = True

    class Config:
        env_file = ".env"

    @property
    def database_url(self) -> str:
        """DATABASE_URL with hosted-provider 'postgres://' rewritten for SQLAlchemy."""
        if self.DATABASE_URL.startswith("postgres://"):
            return "postgresql://" + self.DATABASE_URL[len("postgres://"):]
        return self.DATABASE_URL


settings = Settings()
