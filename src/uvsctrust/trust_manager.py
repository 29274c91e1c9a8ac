#! /bin/env python3
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer

from uvsctrust.exceptions import ManifestValidationError, PolicyValidationError
from uvsctrust.internal_config import LOG_FORMAT
from uvsctrust.manifest import load_manifest
from uvsctrust.models import OverrideEntry, RequestType
from uvsctrust.policy_store import (
    EnvironmentTrustState,
    MappingPolicyStore,
    StaticTrustState,
    TrustStateProvider,
)
from uvsctrust.resolver import TrustRequestResolver
from uvsctrust.vscode_paths import find_extension_manifests, resolve_vscode_root

app: typer.Typer = typer.Typer(
    help="Resolve when VS Code extensions have to request workspace trust."
)
logger: logging.Logger = logging.getLogger(__name__)


def _split_assignment(value: str) -> tuple[str, str]:
    key, separator, rest = value.partition("=")
    key = key.strip()
    rest = rest.strip()
    if not separator or not key or not rest:
        raise PolicyValidationError(
            f"Expected 'publisher.name=REQUEST', got {value!r}"
        )
    return key.lower(), rest


def _parse_request(value: str, option: str) -> RequestType:
    request = RequestType.coerce(value)
    if request is None:
        allowed = ", ".join(member.value for member in RequestType)
        raise PolicyValidationError(
            f"Unknown request type {value!r} in {option} (expected one of: {allowed})"
        )
    return request


def parse_override_option(value: str) -> tuple[str, OverrideEntry]:
    """Parse ``publisher.name=REQUEST[@VERSION]`` into a user override."""
    key, rest = _split_assignment(value)
    request_value, at, version = rest.partition("@")
    if at and not version.strip():
        raise PolicyValidationError(f"Missing version after '@' in {value!r}")
    return key, OverrideEntry(
        request=_parse_request(request_value.strip(), value),
        version=version.strip() if at else None,
    )


def parse_product_option(value: str) -> tuple[str, RequestType]:
    """Parse ``publisher.name=REQUEST`` into a product policy value."""
    key, rest = _split_assignment(value)
    return key, _parse_request(rest, value)


def build_policy_store(
    overrides: list[str],
    product_defaults: list[str],
    product_overrides: list[str],
) -> MappingPolicyStore:
    user_table: dict[str, OverrideEntry] = {}
    for value in overrides:
        key, entry = parse_override_option(value)
        user_table[key] = entry

    product_table: dict[str, dict[str, RequestType]] = {}
    for value in product_defaults:
        key, request = parse_product_option(value)
        product_table.setdefault(key, {})["default"] = request
    for value in product_overrides:
        key, request = parse_product_option(value)
        product_table.setdefault(key, {})["override"] = request

    return MappingPolicyStore(user_overrides=user_table, product_policies=product_table)


def build_resolver(
    overrides: list[str],
    product_defaults: list[str],
    product_overrides: list[str],
    trust_disabled: bool = False,
) -> TrustRequestResolver:
    try:
        store = build_policy_store(overrides, product_defaults, product_overrides)
    except PolicyValidationError as e:
        raise typer.BadParameter(str(e)) from e

    trust_state: TrustStateProvider = (
        StaticTrustState(enabled=False) if trust_disabled else EnvironmentTrustState()
    )
    return TrustRequestResolver(trust_state=trust_state, policy_store=store)


def _configure_logging(log_level: str) -> None:
    logging.basicConfig(
        level=(getattr(logging, log_level.upper(), logging.INFO)),
        format=LOG_FORMAT,
    )


@app.command()
def resolve(
    package_json: Path = typer.Argument(
        ..., help="Path to the extension's package.json"
    ),
    override: Optional[List[str]] = typer.Option(
        None, help="User override, e.g. pub.ext=never or pub.ext=never@1.0.0"
    ),
    product_default: Optional[List[str]] = typer.Option(
        None, help="Product default, e.g. pub.ext=onDemand"
    ),
    product_override: Optional[List[str]] = typer.Option(
        None, help="Product override, e.g. pub.ext=onDemand"
    ),
    trust_disabled: bool = typer.Option(
        False, help="Treat workspace trust enforcement as disabled"
    ),
    explain: bool = typer.Option(False, help="Also print the deciding rule"),
    log_level: str = "info",
) -> None:
    """Print the workspace trust request type of one extension."""
    _configure_logging(log_level)
    resolver = build_resolver(
        override or [], product_default or [], product_override or [], trust_disabled
    )
    try:
        manifest = load_manifest(package_json)
    except ManifestValidationError as e:
        raise typer.BadParameter(str(e), param_hint="PACKAGE_JSON") from e

    resolution = resolver.explain(manifest)
    if explain:
        typer.echo(f"{resolution.request.value} ({resolution.source.value})")
    else:
        typer.echo(resolution.request.value)


@app.command()
def scan(
    extensions_dir: Optional[Path] = typer.Option(
        None, help="Extensions directory (defaults to <vscode root>/extensions)"
    ),
    override: Optional[List[str]] = typer.Option(
        None, help="User override, e.g. pub.ext=never or pub.ext=never@1.0.0"
    ),
    product_default: Optional[List[str]] = typer.Option(
        None, help="Product default, e.g. pub.ext=onDemand"
    ),
    product_override: Optional[List[str]] = typer.Option(
        None, help="Product override, e.g. pub.ext=onDemand"
    ),
    trust_disabled: bool = typer.Option(
        False, help="Treat workspace trust enforcement as disabled"
    ),
    log_level: str = "info",
) -> None:
    """Print the workspace trust request type of every installed extension."""
    _configure_logging(log_level)
    resolver = build_resolver(
        override or [], product_default or [], product_override or [], trust_disabled
    )
    directory = extensions_dir or resolve_vscode_root().joinpath("extensions")
    logger.debug(f"Scanning {directory} for installed extensions")

    results: list[tuple[str, str, str]] = []
    for path in find_extension_manifests(directory):
        try:
            manifest = load_manifest(path)
        except ManifestValidationError as e:
            logger.warning(f"Skipping {path.parent.name}: {e}")
            continue
        results.append(
            (manifest.key, manifest.version, resolver.resolve(manifest).value)
        )

    if not results:
        logger.info(f"No extensions found in {directory}")
    for key, version, request in sorted(results):
        typer.echo(f"{key} {version} {request}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
