"""Domain layer: exceptions shared by application and presentation layers.

No dependencies on infrastructure or presentation.
"""

from app.domain.exceptions import (
    AuthenticationException,
    DuplicateResourceException,
    RbacException,
    ResourceNotFoundException,
    SqlNotConfiguredException,
)

__all__ = [
    "AuthenticationException",
    "DuplicateResourceException",
    "RbacException",
    "ResourceNotFoundException",
    "SqlNotConfiguredException",
]
