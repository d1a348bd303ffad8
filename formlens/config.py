import logging
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    host: str = "127.0.0.1"
    port: int = 9000
    token_file: Path = Path("tokens.json")
    client_secret_file: Path = Path("client_secret.json")
    log_level: str = "INFO"
    request_delay_ms: int = 100  # constant pause before each Forms API call
    num_retries: int = 3  # passed to googleapiclient's execute()

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()


def setup_logging(log_level: str = "INFO") -> logging.Logger:
    """Configure the formlens logger once and return it."""
    logger = logging.getLogger("formlens")
    logger.setLevel(getattr(logging, log_level.upper()))

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
        logger.addHandler(handler)

    return logger
