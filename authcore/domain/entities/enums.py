"""
Domain Enums

Enumeration types used across domain entities.
"""

from enum import Enum


class UserStatus(str, Enum):
    """Credential record status"""

    active = "active"
    disabled = "disabled"
