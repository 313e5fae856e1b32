"""Authentication token models."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field


class LoginResponse(BaseModel):
    """Body of a successful login response.

    The store returns the bearer token as either ``token`` or ``jwt``;
    blank values count as absent.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    token: str | None = None
    jwt: str | None = None

    @property
    def bearer(self) -> str | None:
        for candidate in (self.token, self.jwt):
            if candidate and candidate.strip():
                return candidate.strip()
        return None


class Credential(BaseModel):
    """Cached bearer credential for the store's REST API.

    Parameters
    ----------
    token : str
        Opaque bearer token.
    obtained_at : datetime
        UTC time of the login that produced the token.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    token: str = Field(min_length=1)
    obtained_at: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))

    def authorization_header(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}
