"""
Course configuration.

Settings are read from environment variables prefixed with ``COURSE_`` and from
an optional ``.env`` file in the working directory, e.g.::

    COURSE_DATA_DIR=/srv/course-data
    COURSE_LOG_LEVEL=DEBUG
"""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


PROJECT_DIRECTORY = Path(__file__).parent.parent


class Settings(BaseSettings):
    """
    Runtime settings for the course app and the dataset fetcher.

    Attributes:
        data_dir (Path): Folder holding the bundled and fetched CSV files.
        random_state (int): Seed used by every sampler, splitter and model.
        max_sample (int): Upper bound on rows fed to the slower chapters.
        log_level (str): Minimum loguru level.
        log_json (bool): Emit JSON log records instead of the pretty format.
        wine_quality_url (str): Source of the red wine quality table.
    """

    data_dir: Path = PROJECT_DIRECTORY / "data"
    random_state: int = 42
    max_sample: int = 5000
    log_level: str = "INFO"
    log_json: bool = False
    wine_quality_url: str = (
        "https://archive.ics.uci.edu/ml/machine-learning-databases/"
        "wine-quality/winequality-red.csv"
    )

    model_config = SettingsConfigDict(env_prefix="COURSE_", env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()
