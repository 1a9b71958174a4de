"""Sign-in credentials.

A closed set of credential shapes, one per sign-in method. Each carries only
the fields its method needs; the `method` field discriminates the union.
"""

from typing import Annotated, Any, Literal, Mapping, Union

from pydantic import Field

from idlink.domain.value.common import ValueObject
from idlink.domain.value.types import AuthProvider


class EmailCredential(ValueObject):
    """Email and password, with an optional second factor."""

    method: Literal["credentials"] = "credentials"
    email: str
    password: str
    two_factor_code: str | None = None

    def missing_fields(self) -> list[str]:
        return [f for f in ("email", "password") if not getattr(self, f).strip()]


class PhoneCredential(ValueObject):
    """Phone number and the one-time code sent to it."""

    method: Literal["phone"] = "phone"
    phone_number: str
    code: str

    def missing_fields(self) -> list[str]:
        return [f for f in ("phone_number", "code") if not getattr(self, f).strip()]


class OAuthCredential(ValueObject):
    """Profile vouched for by an OAuth provider after the code exchange."""

    method: Literal["oauth"] = "oauth"
    provider: AuthProvider
    provider_account_id: str
    email: str | None = None
    name: str | None = None
    image: str | None = None

    def missing_fields(self) -> list[str]:
        return [] if self.provider_account_id.strip() else ["provider_account_id"]


Credential = Annotated[
    Union[EmailCredential, PhoneCredential, OAuthCredential],
    Field(discriminator="method"),
]


def parse_credential(method: str, data: Mapping[str, Any]) -> Credential:
    """Build a credential from loosely typed form data.

    Absent fields become empty strings so the caller can report every
    missing field at once instead of failing on the first.

    Raises:
        ValueError: If the method is unknown
    """
    if method == "credentials":
        return EmailCredential(
            email=data.get("email") or "",
            password=data.get("password") or "",
            two_factor_code=data.get("two_factor_code") or None,
        )
    if method == "phone":
        return PhoneCredential(
            phone_number=data.get("phone_number") or "",
            code=data.get("code") or "",
        )
    raise ValueError(f"Unsupported sign-in method: {method}")
