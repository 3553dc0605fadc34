from pathlib import Path

import toml


class ProjectRootNotFound(Exception):
    pass


def get_project_root_dir() -> Path:
    """Look for the root pyproject.toml"""
    current = Path(__file__).parent

    # Walk up until we find a pyproject.toml
    while True:
        candidate = current / "pyproject.toml"
        if candidate.exists():
            return current

        # Check if we've reached the filesystem root
        parent = current.parent
        if parent == current:
            raise ProjectRootNotFound

        current = parent


def get_project_version() -> str:
    root_dir = get_project_root_dir()
    with open(root_dir / "pyproject.toml") as f:
        data = toml.load(f)

    version = data.get("project", {}).get("version")

    if not version:
        raise ValueError("Version not found in pyproject.toml")

    assert isinstance(version, str)
    return version
