"""Core types shared across the relay."""

from slackirc.core.errors import BridgeError, ConfigurationError

__all__ = ["BridgeError", "ConfigurationError"]
