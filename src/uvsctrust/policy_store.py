from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from typing import Any, Protocol

from uvsctrust.internal_config import (
    ENV_TRUST_ENABLED,
    FALSY_VALUES,
    PRODUCT_POLICY_KEY,
    USER_OVERRIDE_SETTING,
)
from uvsctrust.models import OverrideEntry, ProductPolicyEntry, RequestType

logger: logging.Logger = logging.getLogger(__name__)


class TrustStateProvider(Protocol):
    def is_trust_enforcement_enabled(self) -> bool: ...


class PolicyStore(Protocol):
    def get_user_override(
        self, extension_key: str
    ) -> OverrideEntry | Mapping[str, Any] | None: ...

    def get_product_policy(
        self, extension_key: str
    ) -> ProductPolicyEntry | Mapping[str, Any] | None: ...


class StaticTrustState(object):
    """Trust state with a fixed enforcement flag."""

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled

    def is_trust_enforcement_enabled(self) -> bool:
        return self.enabled


class EnvironmentTrustState(object):
    """Read the enforcement flag from the environment on every query.

    Unset means enabled, matching the workbench default for
    ``security.workspace.trust.enabled``.
    """

    def __init__(self, variable: str = ENV_TRUST_ENABLED) -> None:
        self.variable = variable

    def is_trust_enforcement_enabled(self) -> bool:
        value = os.environ.get(self.variable, "").strip().lower()
        return value not in FALSY_VALUES


def as_override_entry(value: object) -> OverrideEntry | None:
    """Normalize a user override into an ``OverrideEntry``.

    Returns ``None`` when the entry is absent or unusable, so the caller
    treats it like a missing override.
    """
    if value is None:
        return None
    if isinstance(value, OverrideEntry):
        raw_request: object = value.request
        version: object = value.version
    elif isinstance(value, Mapping):
        raw_request = value.get("request")
        version = value.get("version")
    else:
        logger.warning(f"Ignoring override of unexpected type {type(value).__name__}")
        return None

    request = RequestType.coerce(raw_request)
    if request is None:
        logger.warning(f"Ignoring override with unknown request type {raw_request!r}")
        return None
    if version is not None and not isinstance(version, str):
        logger.warning(f"Ignoring override with non-string version {version!r}")
        return None
    return OverrideEntry(request=request, version=version)


def as_product_policy(value: object) -> ProductPolicyEntry | None:
    """Normalize a product policy entry, dropping unknown request types."""
    if value is None:
        return None
    if isinstance(value, ProductPolicyEntry):
        raw_default: object = value.default
        raw_override: object = value.override
    elif isinstance(value, Mapping):
        raw_default = value.get("default")
        raw_override = value.get("override")
    else:
        logger.warning(
            f"Ignoring product policy of unexpected type {type(value).__name__}"
        )
        return None

    default = RequestType.coerce(raw_default)
    override = RequestType.coerce(raw_override)
    if raw_default is not None and default is None:
        logger.warning(f"Ignoring unknown product default {raw_default!r}")
    if raw_override is not None and override is None:
        logger.warning(f"Ignoring unknown product override {raw_override!r}")
    return ProductPolicyEntry(default=default, override=override)


def _lookup_setting(settings: Mapping[str, Any], dotted_key: str) -> Any:
    """Return a setting stored either flat (``"a.b.c"``) or nested."""
    if dotted_key in settings:
        return settings[dotted_key]

    current: Any = settings
    for part in dotted_key.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return None
        current = current[part]
    return current


class MappingPolicyStore(object):
    """In-memory override tables keyed by lowercase extension key."""

    user_overrides: dict[str, OverrideEntry]
    product_policies: dict[str, ProductPolicyEntry]

    def __init__(
        self,
        user_overrides: Mapping[str, Any] | None = None,
        product_policies: Mapping[str, Any] | None = None,
    ) -> None:
        self.user_overrides = {}
        self.product_policies = {}

        for key, value in (user_overrides or {}).items():
            entry = as_override_entry(value)
            if entry is not None:
                self.user_overrides[key.lower()] = entry

        for key, value in (product_policies or {}).items():
            policy = as_product_policy(value)
            if policy is not None:
                self.product_policies[key.lower()] = policy

    @classmethod
    def from_configuration(
        cls,
        settings: Mapping[str, Any] | None = None,
        product: Mapping[str, Any] | None = None,
    ) -> MappingPolicyStore:
        """Build a store from already-loaded settings and product objects."""
        user_table = _lookup_setting(settings or {}, USER_OVERRIDE_SETTING)
        product_table = (product or {}).get(PRODUCT_POLICY_KEY)

        if user_table is not None and not isinstance(user_table, Mapping):
            logger.warning(f"Ignoring non-object {USER_OVERRIDE_SETTING} setting")
            user_table = None
        if product_table is not None and not isinstance(product_table, Mapping):
            logger.warning(f"Ignoring non-object {PRODUCT_POLICY_KEY} entry")
            product_table = None

        return cls(user_overrides=user_table, product_policies=product_table)

    def get_user_override(self, extension_key: str) -> OverrideEntry | None:
        return self.user_overrides.get(extension_key.lower())

    def get_product_policy(self, extension_key: str) -> ProductPolicyEntry | None:
        return self.product_policies.get(extension_key.lower())
