from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

# for parsing package.json files (if they include comments etc.)
import json5

from uvsctrust.exceptions import ManifestValidationError
from uvsctrust.models import ExtensionIdentity, ExtensionManifest, RequestType

logger: logging.Logger = logging.getLogger(__name__)


def _optional_string(value: object) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _declared_request(
    data: Mapping[str, Any], extension_key: str
) -> RequestType | None:
    workspace_trust = data.get("workspaceTrust")
    if not isinstance(workspace_trust, Mapping):
        return None

    raw_request = workspace_trust.get("request")
    if raw_request is None:
        return None

    request = RequestType.coerce(raw_request)
    if request is None:
        logger.warning(
            f"{extension_key} declares unknown workspaceTrust.request {raw_request!r}"
        )
    return request


def manifest_from_package_json(data: Mapping[str, Any]) -> ExtensionManifest:
    """Build an ``ExtensionManifest`` from the contents of a package.json."""
    if not isinstance(data, Mapping):
        raise ManifestValidationError("Extension manifest must be a JSON object")

    publisher = _optional_string(data.get("publisher"))
    name = _optional_string(data.get("name"))
    if publisher is None or name is None:
        raise ManifestValidationError(
            "Extension manifest requires non-empty 'publisher' and 'name' fields"
        )

    identity = ExtensionIdentity(publisher=publisher, name=name)
    version = data.get("version")
    if version is not None and not isinstance(version, str):
        logger.warning(f"{identity.key} declares non-string version {version!r}")
    return ExtensionManifest(
        identity=identity,
        version=version if isinstance(version, str) else "",
        main=_optional_string(data.get("main")),
        browser=_optional_string(data.get("browser")),
        workspace_trust_request=_declared_request(data, identity.key),
    )


def load_manifest(path: Path) -> ExtensionManifest:
    """Read and validate an extension's package.json."""
    if not path.is_file():
        raise ManifestValidationError(f"Extension manifest {path} does not exist")

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestValidationError(
            f"Extension manifest {path} could not be read: {exc}"
        ) from exc

    try:
        data = json5.loads(text)
    except ValueError as exc:
        raise ManifestValidationError(
            f"Extension manifest {path} is not valid JSON: {exc}"
        ) from exc

    logger.debug(f"Loaded extension manifest {path}")
    return manifest_from_package_json(data)
