"""Domain services."""

from src.domain.services.auth_service import (
    AuthError,
    EmailNotFoundError,
    InvalidCredentialsError,
    RegistryAuthenticator,
)
from src.domain.services.registry import (
    AssessmentRegistry,
    RecordNotFoundError,
    SyncResult,
)
from src.domain.services.review import AccessDeniedError, ReviewConsole
from src.domain.services.wizard import FormWizard, WizardStage

__all__ = [
    "AccessDeniedError",
    "AssessmentRegistry",
    "AuthError",
    "EmailNotFoundError",
    "FormWizard",
    "InvalidCredentialsError",
    "RecordNotFoundError",
    "RegistryAuthenticator",
    "ReviewConsole",
    "SyncResult",
    "WizardStage",
]
