from typing import Any, Dict, Optional
from pydantic import BaseModel


class Identity(BaseModel):
    """Decoded identity of the caller, taken from a verified Google ID token."""
    sub: str
    email: Optional[str] = None
    email_verified: bool = False
    name: Optional[str] = None
    picture: Optional[str] = None
    claims: Dict[str, Any] = {}

    @classmethod
    def from_claims(cls, claims: Dict[str, Any]) -> "Identity":
        return cls(
            sub=str(claims["sub"]),
            email=claims.get("email"),
            email_verified=bool(claims.get("email_verified", False)),
            name=claims.get("name"),
            picture=claims.get("picture"),
            claims=dict(claims),
        )
