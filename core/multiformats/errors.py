"""
Module 03 - Multiformats
File: errors.py

Parse errors shared by the multiformats decoders.
"""


class MultiformatError(ValueError):
    """Base class for malformed varints, multibase strings, multihashes and CIDs."""


class CidDecodeError(MultiformatError):
    """Raised when a content identifier cannot be decoded."""
