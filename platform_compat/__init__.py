"""platform-compat: cross-platform API compatibility database generator."""

__version__ = "0.1.0"
