"""Resolve named properties on arbitrary Python values."""

from __future__ import annotations

from importlib import metadata

from .errors import (
    InvalidArgumentError,
    PropertyAccessError,
    PropertyNotAccessibleError,
    SubProcessError,
)
from .resolver import (
    PropertyResolver,
    default_resolver,
    get_gettable_properties,
    get_gettable_property_names,
    get_property,
    get_property_path,
    get_settable_property_names,
    is_property_gettable,
    is_property_settable,
    set_property,
)

try:
    __version__ = metadata.version("propaccess")
except metadata.PackageNotFoundError:
    __version__ = "0.0.0+local"

__all__ = [
    "InvalidArgumentError",
    "PropertyAccessError",
    "PropertyNotAccessibleError",
    "PropertyResolver",
    "SubProcessError",
    "__version__",
    "default_resolver",
    "get_gettable_properties",
    "get_gettable_property_names",
    "get_property",
    "get_property_path",
    "get_settable_property_names",
    "is_property_gettable",
    "is_property_settable",
    "set_property",
]
