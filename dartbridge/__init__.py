"""Dartbridge - Dart FFI binding generator for Rust models."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("dartbridge")
except PackageNotFoundError:
    __version__ = "(local)"
