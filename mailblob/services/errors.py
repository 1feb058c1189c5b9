from __future__ import annotations


class EncodeError(RuntimeError):
    pass


class PartReadError(EncodeError):
    """A leaf body could not be opened or read."""


class DescriptorSerializationError(EncodeError):
    """A descriptor could not be put into canonical form."""
