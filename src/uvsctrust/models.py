from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class RequestType(str, Enum):
    """When an extension needs the workspace to be trusted."""

    ON_START = "onStart"
    ON_DEMAND = "onDemand"
    NEVER = "never"

    @classmethod
    def coerce(cls, value: object) -> RequestType | None:
        """Return the matching member, or ``None`` for unrecognized values."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value)
            except ValueError:
                return None
        return None


class ResolutionSource(str, Enum):
    NO_ENTRY_POINT = "no_entry_point"
    TRUST_DISABLED = "trust_disabled"
    USER_VERSION_OVERRIDE = "user_version_override"
    USER_OVERRIDE = "user_override"
    PRODUCT_OVERRIDE = "product_override"
    MANIFEST = "manifest"
    PRODUCT_DEFAULT = "product_default"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class ExtensionIdentity:
    publisher: str
    name: str

    @property
    def key(self) -> str:
        return f"{self.publisher}.{self.name}".lower()

    def __str__(self) -> str:
        return self.key


@dataclass(frozen=True)
class ExtensionManifest:
    identity: ExtensionIdentity
    version: str = ""
    main: str | None = None
    browser: str | None = None
    workspace_trust_request: RequestType | None = None

    @property
    def key(self) -> str:
        return self.identity.key

    @property
    def has_entry_point(self) -> bool:
        # web extensions run through "browser", so it counts like "main"
        return bool(self.main) or bool(self.browser)


@dataclass(frozen=True)
class OverrideEntry:
    request: RequestType
    version: str | None = None


@dataclass(frozen=True)
class ProductPolicyEntry:
    default: RequestType | None = None
    override: RequestType | None = None


@dataclass(frozen=True)
class Resolution:
    request: RequestType
    source: ResolutionSource
