"""Utility modules."""

from .dates import format_date, resolve_date
from .file_utils import FileUtils
from .logger import setup_logger
from .name_constraints import build_name_constraints, name_to_constraint, names_to_constraints
from .validators import validate_alias, validate_dn_fragment

__all__ = [
    "FileUtils",
    "build_name_constraints",
    "format_date",
    "resolve_date",
    "setup_logger",
    "name_to_constraint",
    "names_to_constraints",
    "validate_alias",
    "validate_dn_fragment",
]
