from __future__ import annotations


class ConfigError(ValueError):
    """Invalid radius or clustering threshold."""


class InputError(ValueError):
    """Point data that cannot be indexed (wrong shape or non-finite values)."""
