"""Shared configuration used by scripts and the session layer.

Kept outside the bounded contexts so scripts and tests can import it without
creating circular imports.
"""

from __future__ import annotations
