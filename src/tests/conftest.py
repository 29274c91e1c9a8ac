from __future__ import annotations

from typing import Any, Callable

import pytest

from uvsctrust.models import ExtensionIdentity, ExtensionManifest, RequestType

ManifestFactory = Callable[..., ExtensionManifest]


@pytest.fixture
def make_manifest() -> ManifestFactory:
    """Build manifests for ``pub.a@1.0.0`` unless told otherwise."""

    def _make(
        main: str | None = None,
        request: RequestType | Any = None,
        version: str = "1.0.0",
        publisher: str = "pub",
        name: str = "a",
        browser: str | None = None,
    ) -> ExtensionManifest:
        return ExtensionManifest(
            identity=ExtensionIdentity(publisher=publisher, name=name),
            version=version,
            main=main,
            browser=browser,
            workspace_trust_request=request,
        )

    return _make


@pytest.fixture
def package_json() -> dict[str, Any]:
    return {
        "name": "a",
        "publisher": "pub",
        "version": "1.0.0",
        "main": "./out/extension.js",
        "workspaceTrust": {"request": "onDemand"},
    }
