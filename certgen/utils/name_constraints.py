"""Conversion of host names to openssl nameConstraints syntax."""

import re
from typing import Iterable

_TYPED_NAME = re.compile(r"^[A-Za-z]+:.+")
_IPV4 = re.compile(r"^([0-9]{1,3}\.){3}[0-9]{1,3}$")


def name_to_constraint(name: str) -> str:
    """
    Convert a single name to a typed constraint.

    Names that already carry a ``TYPE:`` prefix are passed through, dotted quads
    become exact IP constraints and anything else is a DNS name.

    >>> name_to_constraint("8.8.8.8")
    'IP:8.8.8.8/255.255.255.255'
    >>> name_to_constraint("example.com")
    'DNS:example.com'
    """
    if _TYPED_NAME.match(name):
        return name
    if _IPV4.match(name):
        return f"IP:{name}/255.255.255.255"
    return f"DNS:{name}"


def names_to_constraints(names: Iterable[str], keyword: str) -> str:
    """Join names as ``keyword;constraint`` items separated by commas."""
    return ",".join(f"{keyword};{name_to_constraint(name)}" for name in names)


def build_name_constraints(permitted: Iterable[str], excluded: Iterable[str], critical: bool = True) -> str:
    """
    Build the value of the nameConstraints extension.

    Args:
        permitted: Names allowed in the subtree
        excluded: Names excluded from the subtree
        critical: Whether the extension is marked critical

    Returns:
        Extension value, empty string when both lists are empty
    """
    parts = [
        part
        for part in (names_to_constraints(permitted, "permitted"), names_to_constraints(excluded, "excluded"))
        if part
    ]
    if not parts:
        return ""

    prefix = "critical," if critical else ""
    return prefix + ",".join(parts)
