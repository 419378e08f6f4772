"""svcctl: cross-platform service lifecycle and dependency manager."""

__version__ = "0.4.0"
