"""Top-level package for the pinyinify line transliterator."""

# Re-export commonly used namespaces for convenience when running as a module.
from . import cli, translit, utils  # noqa: F401

__all__ = ["cli", "translit", "utils"]
