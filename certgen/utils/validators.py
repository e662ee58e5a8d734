"""Input validation utilities."""

import re
from pathlib import Path


def validate_alias(store_dir: Path, alias: str) -> Path:
    """
    Validate alias name and construct its directory path.

    Aliases may contain subdirectories but must stay inside the store.

    Args:
        store_dir: Base directory of the alias store
        alias: Alias name

    Returns:
        Full alias path (the directory need not exist yet)

    Raises:
        ValueError: If alias is empty or escapes the store
    """
    if not alias or not alias.strip():
        raise ValueError("Alias name can't be empty")

    # Check for directory traversal attempts
    if ".." in Path(alias).parts or Path(alias).is_absolute():
        raise ValueError(f"Invalid alias: {alias}")

    alias_path = store_dir / alias

    try:
        alias_path.resolve().relative_to(store_dir.resolve())
    except ValueError:
        raise ValueError(f"Invalid alias path: {alias}")

    return alias_path


def validate_dn_fragment(fragment: str) -> str:
    """
    Validate a single distinguished name element.

    Args:
        fragment: DN element such as ``CN = example.com`` or ``O=Example``

    Returns:
        The fragment unchanged

    Raises:
        ValueError: If fragment has no attribute name or no value
    """
    name, sep, value = fragment.partition("=")
    if not sep or not name.strip() or not value.strip():
        raise ValueError(f"DN element must be in the form 'name = value': {fragment!r}")

    return fragment
