from __future__ import annotations

# workbench setting holding user/workspace overrides, keyed by extension id
USER_OVERRIDE_SETTING = "security.workspace.trust.extensionRequest"
# product.json key holding deployment-level defaults and overrides
PRODUCT_POLICY_KEY = "extensionWorkspaceTrustRequest"

ENV_TRUST_ENABLED = "UVSCTRUST_TRUST_ENABLED"
ENV_VSCODE_ROOT = "UVSCTRUST_VSCODE_ROOT"

FALSY_VALUES = frozenset({"0", "false", "no", "off"})

LOG_FORMAT = "%(relativeCreated)d [%(levelname)s] %(message)s"
