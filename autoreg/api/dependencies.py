"""FastAPI dependencies."""

from functools import lru_cache

from autoreg.config.settings import settings
from autoreg.session import TrainingSession, build_session_from_settings


@lru_cache(maxsize=1)
def get_training_session() -> TrainingSession:
    """Process-wide training session, loaded from storage on first use."""
    return build_session_from_settings(settings)
