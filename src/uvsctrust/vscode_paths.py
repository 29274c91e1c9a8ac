from __future__ import annotations

import os
import platform
from pathlib import Path

from uvsctrust.internal_config import ENV_VSCODE_ROOT

# data folders of VS Code Server, remote containers and desktop, in lookup order
VSCODE_DATA_FOLDERS = (".vscode-server", ".vscode-remote", ".vscode")


def resolve_vscode_root() -> Path:
    """Return the VS Code data root that holds the ``extensions`` folder."""
    for variable in (ENV_VSCODE_ROOT, "VSCODE_AGENT_FOLDER"):
        explicit_root = os.environ.get(variable, "").strip()
        if explicit_root:
            return Path(explicit_root).expanduser().resolve()

    home = Path.home()
    existing = [
        home.joinpath(folder)
        for folder in VSCODE_DATA_FOLDERS
        if home.joinpath(folder).exists()
    ]
    if existing:
        return existing[0].resolve()

    fallback = ".vscode-server" if platform.system().lower() == "linux" else ".vscode"
    return home.joinpath(fallback).resolve()


def find_extension_manifests(extensions_dir: Path) -> list[Path]:
    """Return the package.json of every unpacked extension, sorted by folder."""
    if not extensions_dir.is_dir():
        return []
    return sorted(
        path
        for path in extensions_dir.glob("*/package.json")
        if path.is_file()
    )
