from . import models  # noqa: F401
from .base import Base
from .models import AssessmentRow
from .session import dispose_engine, get_session_factory

__all__ = ["AssessmentRow", "Base", "dispose_engine", "get_session_factory"]
