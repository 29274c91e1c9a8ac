from __future__ import annotations

import pytest

from uvsctrust import policy_store
from uvsctrust.models import OverrideEntry, ProductPolicyEntry, RequestType
from uvsctrust.policy_store import (
    EnvironmentTrustState,
    MappingPolicyStore,
    StaticTrustState,
)


def test_static_trust_state() -> None:
    assert StaticTrustState().is_trust_enforcement_enabled() is True
    assert StaticTrustState(enabled=False).is_trust_enforcement_enabled() is False


@pytest.mark.parametrize("value", ["0", "false", "No", " OFF "])
def test_environment_trust_state_disabled_values(
    monkeypatch: pytest.MonkeyPatch, value: str
) -> None:
    monkeypatch.setenv("UVSCTRUST_TRUST_ENABLED", value)

    assert EnvironmentTrustState().is_trust_enforcement_enabled() is False


@pytest.mark.parametrize("value", ["1", "true", "yes", ""])
def test_environment_trust_state_enabled_values(
    monkeypatch: pytest.MonkeyPatch, value: str
) -> None:
    monkeypatch.setenv("UVSCTRUST_TRUST_ENABLED", value)

    assert EnvironmentTrustState().is_trust_enforcement_enabled() is True


def test_environment_trust_state_defaults_to_enabled(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.delenv("UVSCTRUST_TRUST_ENABLED", raising=False)

    assert EnvironmentTrustState().is_trust_enforcement_enabled() is True


def test_environment_trust_state_is_read_on_every_query(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    state = EnvironmentTrustState(variable="CUSTOM_TRUST_FLAG")
    monkeypatch.setenv("CUSTOM_TRUST_FLAG", "true")
    assert state.is_trust_enforcement_enabled() is True

    monkeypatch.setenv("CUSTOM_TRUST_FLAG", "false")
    assert state.is_trust_enforcement_enabled() is False


def test_as_override_entry_normalizes_mappings() -> None:
    assert policy_store.as_override_entry(None) is None
    assert policy_store.as_override_entry({"request": "never"}) == OverrideEntry(
        request=RequestType.NEVER
    )
    assert policy_store.as_override_entry(
        {"request": "onDemand", "version": "1.2.3"}
    ) == OverrideEntry(request=RequestType.ON_DEMAND, version="1.2.3")


def test_as_override_entry_rejects_unusable_values() -> None:
    assert policy_store.as_override_entry("never") is None
    assert policy_store.as_override_entry({}) is None
    assert policy_store.as_override_entry({"request": "sometimes"}) is None
    assert policy_store.as_override_entry({"request": "never", "version": 1}) is None


def test_as_product_policy_drops_unknown_values() -> None:
    assert policy_store.as_product_policy(None) is None
    assert policy_store.as_product_policy(["never"]) is None
    assert policy_store.as_product_policy(
        {"default": "never", "override": "always"}
    ) == ProductPolicyEntry(default=RequestType.NEVER, override=None)


def test_mapping_store_normalizes_keys_and_entries() -> None:
    store = MappingPolicyStore(
        user_overrides={
            "Pub.A": {"request": "never", "version": "1.0.0"},
            "pub.broken": {"request": "maybe"},
        },
        product_policies={"PUB.B": {"default": "onDemand"}},
    )

    assert store.get_user_override("pub.a") == OverrideEntry(
        request=RequestType.NEVER, version="1.0.0"
    )
    assert store.get_user_override("PUB.A") == store.get_user_override("pub.a")
    assert store.get_user_override("pub.broken") is None
    assert store.get_user_override("pub.missing") is None
    assert store.get_product_policy("pub.b") == ProductPolicyEntry(
        default=RequestType.ON_DEMAND
    )
    assert store.get_product_policy("pub.a") is None


def test_from_configuration_reads_flat_setting_key() -> None:
    store = MappingPolicyStore.from_configuration(
        settings={
            "security.workspace.trust.extensionRequest": {
                "pub.a": {"request": "never"}
            }
        },
        product={"extensionWorkspaceTrustRequest": {"pub.a": {"override": "onStart"}}},
    )

    assert store.get_user_override("pub.a") == OverrideEntry(request=RequestType.NEVER)
    assert store.get_product_policy("pub.a") == ProductPolicyEntry(
        override=RequestType.ON_START
    )


def test_from_configuration_reads_nested_settings() -> None:
    store = MappingPolicyStore.from_configuration(
        settings={
            "security": {
                "workspace": {
                    "trust": {
                        "extensionRequest": {
                            "pub.a": {"request": "never", "version": "1.0.0"}
                        }
                    }
                }
            }
        }
    )

    assert store.get_user_override("pub.a") == OverrideEntry(
        request=RequestType.NEVER, version="1.0.0"
    )
    assert store.get_product_policy("pub.a") is None


def test_from_configuration_ignores_malformed_tables() -> None:
    store = MappingPolicyStore.from_configuration(
        settings={"security.workspace.trust.extensionRequest": ["pub.a"]},
        product={"extensionWorkspaceTrustRequest": "never"},
    )

    assert store.user_overrides == {}
    assert store.product_policies == {}


def test_from_configuration_without_inputs() -> None:
    store = MappingPolicyStore.from_configuration()

    assert store.get_user_override("pub.a") is None
    assert store.get_product_policy("pub.a") is None
