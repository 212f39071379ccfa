from functools import lru_cache

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker

load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = "sqlite:///./learnsphere.db"

    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = "qwen:latest"
    llm_timeout_seconds: float = 120.0

    # Minimum quiz percentage that marks a lesson complete.
    quiz_pass_threshold: int = 50
    default_quiz_xp: int = 15
    default_lesson_xp: int = 10
    chapter_completion_bonus: int = 25
    # Python weekday numbering: Monday=0 .. Sunday=6.
    week_start_day: int = 6

    write_retries: int = 3

    log_level: str = "INFO"
    log_dir: str = "logs"
    log_console: bool = True
    cors_origins: list[str] = ["*"]


@lru_cache
def get_settings() -> Settings:
    return Settings()


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


settings = get_settings()
engine = create_engine(settings.database_url, **_engine_kwargs(settings.database_url))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def create_db():
    # Registers the ORM tables on Base before create_all.
    import api.models.models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def check_db() -> None:
    """Raise if the database cannot answer a trivial query."""
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
