"""Claims carried by an authenticated request."""

from collections.abc import Iterable
from dataclasses import dataclass, field


class ClaimTypes:
    """Default claim type names; deployments override them in ``IdentityConfig``."""

    SUBJECT = "sub"
    NAME = "name"
    EMAIL = "email"
    ROLE = "role"
    PERMISSION = "Permission"
    DOMAIN_ID = "DomainId"


@dataclass(frozen=True)
class Claim:
    type: str
    value: str


@dataclass(frozen=True)
class ClaimsPrincipal:
    """
    Identity presented by the caller of a request.

    ``authentication_type`` is ``None`` for anonymous callers; any other value
    means the claims were authenticated by that scheme.
    """

    claims: tuple[Claim, ...] = field(default_factory=tuple)
    authentication_type: str | None = None

    @classmethod
    def anonymous(cls) -> "ClaimsPrincipal":
        return cls()

    @classmethod
    def authenticated(
        cls, claims: Iterable[Claim], authentication_type: str = "Bearer"
    ) -> "ClaimsPrincipal":
        return cls(tuple(claims), authentication_type)

    @property
    def is_authenticated(self) -> bool:
        return self.authentication_type is not None

    def find_first(self, claim_type: str) -> str | None:
        for claim in self.claims:
            if claim.type == claim_type and claim.value:
                return claim.value
        return None

    def find_all(self, claim_type: str) -> list[str]:
        return [claim.value for claim in self.claims if claim.type == claim_type]

    def has_claim(self, claim_type: str, value: str) -> bool:
        return any(claim.type == claim_type and claim.value == value for claim in self.claims)
