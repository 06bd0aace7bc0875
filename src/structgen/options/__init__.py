"""Options module - per-call conversion settings and their YAML files."""

from structgen.options.base import ConversionOptions, Dialect, TagStyle, DEFAULT_ROOT_NAME
from structgen.options.loader import OptionsLoader, load_options

__all__ = [
    "ConversionOptions",
    "Dialect",
    "TagStyle",
    "DEFAULT_ROOT_NAME",
    "OptionsLoader",
    "load_options",
]
