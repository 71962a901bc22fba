from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_path: str = "data/gamefinder.db"
    project_root: Path = Path(__file__).resolve().parent.parent
    # 0 はタイムアウトなし
    query_timeout_seconds: float = 0
    unrated_limit: int = 10
    log_level: str = "INFO"

    @property
    def db_path(self) -> Path:
        return self.project_root / self.database_path

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "GAMEFINDER_",
        "extra": "ignore",
    }


settings = Settings()
