# credentials/credential.py
"""
SessionCredential: the signed cache of a sovereign user's rank and profile.

The rank inside is a cache, NOT a trust boundary. Data handlers re-derive
rank from sovereign_id (accounts.authz).

Claims layout (HS256 JWT):
    sub      sovereign id
    ext      external identity reference (provider management calls only)
    iat/exp  whole seconds, floor/ceil of the millisecond window
    iat_ms/exp_ms  the exact window; expiry is decided on these
    profile  every cached field, JSON-native types only
"""

import math
from dataclasses import asdict, dataclass, field, fields
from typing import Optional, Tuple


@dataclass(frozen=True)
class SessionCredential:
    sovereign_id: str
    external_id: Optional[str] = None
    rank: Optional[str] = None
    email: str = ""
    secondary_email: Optional[str] = None
    email_verified: bool = False
    first_name: str = ""
    last_name: str = ""
    avatar_url: Optional[str] = None
    brand_logo_url: Optional[str] = None
    setup_status: Optional[str] = None
    subscription_status: Optional[str] = None
    business_country: Optional[str] = None
    entity_name: Optional[str] = None
    social_name: Optional[str] = None
    phone_number: Optional[str] = None
    org_id: Optional[str] = None
    theme_name: str = "transtheme"
    theme_mode: str = "light"
    miror_enchantment_enabled: bool = True
    miror_enchantment_timing: Optional[str] = None
    dashboard_layout: Optional[str] = None
    dashboard_widgets: Tuple[str, ...] = ()
    login_count: int = 0

    # Window in epoch milliseconds. Not part of equality: two credentials
    # carrying the same identity and fields are the same credential.
    issued_at: Optional[int] = field(default=None, compare=False)
    expires_at: Optional[int] = field(default=None, compare=False)

    def __post_init__(self):
        if not self.sovereign_id:
            raise ValueError("SessionCredential requires a sovereign_id")

    def cached_fields(self) -> dict:
        """Every field mirrored from the user record (rank and profile)."""
        return {
            name: getattr(self, name)
            for name in CACHED_FIELDS
        }

    def is_expired(self, now_ms: int) -> bool:
        return self.expires_at is None or now_ms >= self.expires_at

    def as_public_dict(self) -> dict:
        """Hydration payload for the client (no external id)."""
        data = asdict(self)
        data.pop("external_id")
        data["dashboard_widgets"] = list(self.dashboard_widgets)
        return data

    def to_claims(self) -> dict:
        profile = self.cached_fields()
        profile["dashboard_widgets"] = list(self.dashboard_widgets)
        return {
            "sub": self.sovereign_id,
            "ext": self.external_id,
            "iat": math.floor(self.issued_at / 1000),
            "exp": math.ceil(self.expires_at / 1000),
            "iat_ms": self.issued_at,
            "exp_ms": self.expires_at,
            "profile": profile,
        }

    @classmethod
    def from_claims(cls, claims: dict) -> "SessionCredential":
        profile = {
            key: value
            for key, value in (claims.get("profile") or {}).items()
            if key in CACHED_FIELDS
        }
        if "dashboard_widgets" in profile:
            profile["dashboard_widgets"] = tuple(profile["dashboard_widgets"] or ())
        return cls(
            sovereign_id=claims["sub"],
            external_id=claims.get("ext"),
            issued_at=claims.get("iat_ms"),
            expires_at=claims.get("exp_ms"),
            **profile,
        )


CACHED_FIELDS = tuple(
    f.name
    for f in fields(SessionCredential)
    if f.name not in {"sovereign_id", "external_id", "issued_at", "expires_at"}
)
