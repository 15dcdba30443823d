"""
Records exchanged with the Market Navigator backend.

The backend speaks camelCase JSON. User and Admin keep the payload they
were built from verbatim (``raw``) and expose snake_case properties over
it, so a cached record always equals what the backend sent.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, Any, List


NOT_SPECIFIED = "Not specified"


class UserType(str, Enum):
    """Where the company is based"""
    INDIAN = "Indian"
    FOREIGNER = "Foreigner"


class UserRole(str, Enum):
    """Trade role on the platform"""
    BUYER = "Buyer"
    SELLER = "Seller"


class Sector(str, Enum):
    """Sectors the backend accepts at sign-up"""
    SEAFOOD = "Seafood"
    TEXTILE = "Textile"
    BOTH = "Both"
    NOT_SPECIFIED = NOT_SPECIFIED


@dataclass
class User:
    """Cached identity + profile record of the signed-in user"""
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "User":
        if not isinstance(payload, dict):
            raise ValueError(f"Expected a user object, got {type(payload).__name__}")
        return cls(raw=dict(payload))

    def to_payload(self) -> Dict[str, Any]:
        return dict(self.raw)

    def merged(self, partial: Dict[str, Any]) -> "User":
        """New record with ``partial`` fields laid over this one"""
        return User.from_payload({**self.raw, **partial})

    @property
    def id(self) -> str:
        return str(self.raw.get("id") or self.raw.get("_id") or "")

    @property
    def email(self) -> str:
        return self.raw.get("email", "")

    @property
    def company_name(self) -> str:
        return self.raw.get("companyName", "")

    @property
    def contact_person(self) -> str:
        return self.raw.get("contactPerson", "")

    @property
    def user_type(self) -> str:
        return self.raw.get("userType", "")

    @property
    def role(self) -> str:
        return self.raw.get("role", "")

    @property
    def is_admin(self) -> bool:
        return bool(self.raw.get("isAdmin", False))

    @property
    def sector(self) -> str:
        return self.raw.get("sector") or NOT_SPECIFIED

    @property
    def hs_code(self) -> str:
        return self.raw.get("hsCode") or ""

    @property
    def target_countries(self) -> List[str]:
        return list(self.raw.get("targetCountries") or [])

    @property
    def is_seller(self) -> bool:
        return self.role == UserRole.SELLER.value

    @property
    def is_buyer(self) -> bool:
        return self.role == UserRole.BUYER.value

    @property
    def profile_completed(self) -> bool:
        """
        Backend flag first; otherwise a profile counts as complete once
        sector, HS code and at least one target country are filled in.
        """
        if self.raw.get("profileCompleted") is True:
            return True
        return (
            self.sector != NOT_SPECIFIED
            and bool(self.hs_code)
            and len(self.target_countries) > 0
        )


@dataclass
class Admin:
    """Admin identity; unrelated to any User"""
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Admin":
        if not isinstance(payload, dict):
            raise ValueError(f"Expected an admin object, got {type(payload).__name__}")
        return cls(raw=dict(payload))

    def to_payload(self) -> Dict[str, Any]:
        return dict(self.raw)

    def merged(self, partial: Dict[str, Any]) -> "Admin":
        return Admin.from_payload({**self.raw, **partial})

    @property
    def id(self) -> str:
        return str(self.raw.get("id", ""))

    @property
    def admin_id(self) -> str:
        return self.raw.get("adminId", "")

    @property
    def is_admin(self) -> bool:
        return bool(self.raw.get("isAdmin", False))

    @property
    def type(self) -> str:
        return self.raw.get("type", "admin")


@dataclass
class SignupData:
    """Registration payload for POST /auth/signup"""
    email: str
    password: str
    company_name: str
    contact_person: str
    user_type: UserType
    role: UserRole
    sector: str = NOT_SPECIFIED
    hs_code: str = ""
    target_countries: List[str] = field(default_factory=list)
    is_admin: bool = False

    def to_payload(self) -> Dict[str, Any]:
        return {
            "email": self.email,
            "password": self.password,
            "companyName": self.company_name,
            "contactPerson": self.contact_person,
            "userType": UserType(self.user_type).value,
            "role": UserRole(self.role).value,
            "isAdmin": self.is_admin,
            "sector": self.sector,
            "hsCode": self.hs_code,
            "targetCountries": list(self.target_countries),
        }


@dataclass
class ProfileUpdate:
    """Fields PUT /users/profile accepts; unset fields are not sent"""
    company_name: Optional[str] = None
    contact_person: Optional[str] = None
    role: Optional[UserRole] = None
    sector: Optional[str] = None
    hs_code: Optional[str] = None
    target_countries: Optional[List[str]] = None

    def to_payload(self) -> Dict[str, Any]:
        mapping = {
            "companyName": self.company_name,
            "contactPerson": self.contact_person,
            "role": UserRole(self.role).value if self.role is not None else None,
            "sector": self.sector,
            "hsCode": self.hs_code,
            "targetCountries": list(self.target_countries) if self.target_countries is not None else None,
        }
        return {k: v for k, v in mapping.items() if v is not None}

    def is_empty(self) -> bool:
        return not self.to_payload()
