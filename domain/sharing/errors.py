"""Sharing Bounded Context - Error Hierarchy."""

from __future__ import annotations


class SharingError(Exception):
    """Base error for share links."""


class MalformedShareTokenError(SharingError):
    """Share token cannot be decoded into a valid payload."""
