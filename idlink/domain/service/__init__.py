"""Domain services for idlink."""

from .activity_service import ActivityService
from .auth_service import AuthService, OAuthClient
from .base import Service
from .candidate_service import CandidateService
from .credential_service import CredentialService, SmsClient, VerifiedCredential
from .group_service import DeactivationResult, GroupService
from .jwt_service import JWTService
from .linking_service import LinkingService, LinkResult
from .two_factor_service import TwoFactorService
from .user_identity_service import UserIdentityService
from .user_service import UserService

__all__ = [
    "ActivityService",
    "AuthService",
    "CandidateService",
    "CredentialService",
    "DeactivationResult",
    "GroupService",
    "JWTService",
    "LinkResult",
    "LinkingService",
    "OAuthClient",
    "Service",
    "SmsClient",
    "TwoFactorService",
    "UserIdentityService",
    "UserService",
    "VerifiedCredential",
]
