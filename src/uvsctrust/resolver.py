from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Callable

from uvsctrust.models import (
    ExtensionManifest,
    RequestType,
    Resolution,
    ResolutionSource,
)
from uvsctrust.policy_store import (
    PolicyStore,
    TrustStateProvider,
    as_override_entry,
    as_product_policy,
)

logger: logging.Logger = logging.getLogger(__name__)

Rule = Callable[
    [ExtensionManifest, TrustStateProvider, PolicyStore], RequestType | None
]


def _no_entry_point(
    manifest: ExtensionManifest, trust_state: TrustStateProvider, store: PolicyStore
) -> RequestType | None:
    # nothing ever executes, so nothing ever needs trust
    return None if manifest.has_entry_point else RequestType.NEVER


def _trust_disabled(
    manifest: ExtensionManifest, trust_state: TrustStateProvider, store: PolicyStore
) -> RequestType | None:
    if trust_state.is_trust_enforcement_enabled():
        return None
    return RequestType.NEVER


def _user_version_override(
    manifest: ExtensionManifest, trust_state: TrustStateProvider, store: PolicyStore
) -> RequestType | None:
    entry = as_override_entry(store.get_user_override(manifest.key))
    if entry is None or entry.version is None:
        return None
    return entry.request if entry.version == manifest.version else None


def _user_override(
    manifest: ExtensionManifest, trust_state: TrustStateProvider, store: PolicyStore
) -> RequestType | None:
    entry = as_override_entry(store.get_user_override(manifest.key))
    if entry is None or entry.version is not None:
        return None
    return entry.request


def _product_override(
    manifest: ExtensionManifest, trust_state: TrustStateProvider, store: PolicyStore
) -> RequestType | None:
    policy = as_product_policy(store.get_product_policy(manifest.key))
    return policy.override if policy is not None else None


def _manifest_preference(
    manifest: ExtensionManifest, trust_state: TrustStateProvider, store: PolicyStore
) -> RequestType | None:
    return RequestType.coerce(manifest.workspace_trust_request)


def _product_default(
    manifest: ExtensionManifest, trust_state: TrustStateProvider, store: PolicyStore
) -> RequestType | None:
    policy = as_product_policy(store.get_product_policy(manifest.key))
    return policy.default if policy is not None else None


# evaluated in order, first non-None result wins
RULES: tuple[tuple[ResolutionSource, Rule], ...] = (
    (ResolutionSource.NO_ENTRY_POINT, _no_entry_point),
    (ResolutionSource.TRUST_DISABLED, _trust_disabled),
    (ResolutionSource.USER_VERSION_OVERRIDE, _user_version_override),
    (ResolutionSource.USER_OVERRIDE, _user_override),
    (ResolutionSource.PRODUCT_OVERRIDE, _product_override),
    (ResolutionSource.MANIFEST, _manifest_preference),
    (ResolutionSource.PRODUCT_DEFAULT, _product_default),
)


def explain_request_type(
    manifest: ExtensionManifest,
    trust_state: TrustStateProvider,
    policy_store: PolicyStore,
) -> Resolution:
    """Resolve the workspace trust request type and report which rule decided it."""
    for source, rule in RULES:
        request = rule(manifest, trust_state, policy_store)
        if request is not None:
            logger.debug(
                f"{manifest.key}@{manifest.version}: {request.value} ({source.value})"
            )
            return Resolution(request=request, source=source)

    logger.debug(f"{manifest.key}@{manifest.version}: falling back to onStart")
    return Resolution(request=RequestType.ON_START, source=ResolutionSource.FALLBACK)


def resolve_request_type(
    manifest: ExtensionManifest,
    trust_state: TrustStateProvider,
    policy_store: PolicyStore,
) -> RequestType:
    return explain_request_type(manifest, trust_state, policy_store).request


class TrustRequestResolver(object):
    """Decide when an extension has to ask for workspace trust.

    Both collaborators are queried synchronously on every call; the resolver
    keeps no state of its own, so one instance can serve any number of
    manifests.
    """

    trust_state: TrustStateProvider
    policy_store: PolicyStore

    def __init__(
        self, trust_state: TrustStateProvider, policy_store: PolicyStore
    ) -> None:
        self.trust_state = trust_state
        self.policy_store = policy_store

    def resolve(self, manifest: ExtensionManifest) -> RequestType:
        return resolve_request_type(manifest, self.trust_state, self.policy_store)

    def explain(self, manifest: ExtensionManifest) -> Resolution:
        return explain_request_type(manifest, self.trust_state, self.policy_store)

    def resolve_many(
        self, manifests: Iterable[ExtensionManifest]
    ) -> dict[str, RequestType]:
        """Resolve a batch of manifests, keyed by extension key."""
        return {manifest.key: self.resolve(manifest) for manifest in manifests}
