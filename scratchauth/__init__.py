"""scratchauth - Layered credential chain for the Scratch web service"""

from .config import ScratchConfig, load_config
from .core.exceptions import (
    AcquisitionTimeout,
    APIError,
    CredentialRejected,
    MalformedResponse,
    NetworkFailure,
    NotAuthenticated,
    SessionError,
)
from .core.types import (
    AcquisitionState,
    CredentialMaterial,
    Identity,
    Roles,
    SessionState,
)
from .providers.scratch import Scratch
from .session.lifecycle import Session

__all__ = [
    "AcquisitionState",
    "AcquisitionTimeout",
    "APIError",
    "CredentialMaterial",
    "CredentialRejected",
    "Identity",
    "MalformedResponse",
    "NetworkFailure",
    "NotAuthenticated",
    "Roles",
    "Scratch",
    "ScratchConfig",
    "Session",
    "SessionError",
    "SessionState",
    "load_config",
]
