"""Sharing Bounded Context - Domain Services.

Share tokens are an OBFUSCATION convenience only. The token is reversed JSON
in base64: anyone holding a link can read the extent back. It is not a
security boundary and must never carry anything confidential.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from domain.sharing.errors import MalformedShareTokenError
from domain.sharing.value_objects import SharePayload
from domain.terrain.services import is_valid_extent, normalize_extent
from domain.terrain.value_objects import GeoExtent

logger = logging.getLogger(__name__)

DEFAULT_SHARE_PARAM = "share"


# ---------------------------------------------------------------------------
# Token codec
# ---------------------------------------------------------------------------
def _pad(token: str) -> str:
    remainder = len(token) % 4
    if remainder == 0:
        return token
    return token + "=" * (4 - remainder)


def encode_share_token(payload: SharePayload) -> str:
    """Serialize ``payload`` into an opaque, URL-safe token.

    Compact JSON, character order reversed, URL-safe base64 without padding.
    """
    serialized = json.dumps(
        payload.model_dump(mode="json", by_alias=True), separators=(",", ":")
    )
    reversed_text = serialized[::-1]
    encoded = base64.urlsafe_b64encode(reversed_text.encode("utf-8"))
    return encoded.decode("ascii").rstrip("=")


def parse_share_token(token: str) -> SharePayload:
    """Invert ``encode_share_token``.

    Both the URL-safe and the standard base64 alphabets are accepted.

    Raises:
        MalformedShareTokenError: If the token cannot be decoded, is not a
            JSON object with an extent, or the extent is geographically invalid
    """
    if not isinstance(token, str) or not token.strip():
        raise MalformedShareTokenError("Empty share token")

    # A raw "+" in a query string arrives as a space
    urlsafe = token.strip().replace(" ", "-").replace("+", "-").replace("/", "_")
    try:
        raw = base64.b64decode(_pad(urlsafe), altchars=b"-_", validate=True)
        data = json.loads(raw.decode("utf-8")[::-1])
    except (binascii.Error, ValueError, RecursionError) as e:
        # UnicodeDecodeError and JSONDecodeError are ValueErrors too;
        # RecursionError comes from deeply nested JSON
        raise MalformedShareTokenError(f"Cannot decode share token: {e}") from e

    if not isinstance(data, dict):
        raise MalformedShareTokenError("Share token is not a JSON object")

    extent = data.get("extent")
    if not isinstance(extent, dict) or not is_valid_extent(extent):
        raise MalformedShareTokenError(f"Share token carries an invalid extent: {extent!r}")

    return SharePayload(
        extent=GeoExtent(
            west=float(extent["west"]),
            south=float(extent["south"]),
            east=float(extent["east"]),
            north=float(extent["north"]),
        ),
        hide_map=bool(data.get("hideMap", False)),
    )


def decode_share_token(token: str) -> SharePayload | None:
    """Like ``parse_share_token`` but returns None instead of raising."""
    try:
        return parse_share_token(token)
    except MalformedShareTokenError as e:
        logger.warning("Error decoding share token: %s", e)
        return None


# ---------------------------------------------------------------------------
# URL parameter
# ---------------------------------------------------------------------------
def _replace_query(url: str, param: str, value: str | None) -> str:
    parts = urlsplit(url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != param]
    if value is not None:
        query.append((param, value))
    return urlunsplit(parts._replace(query=urlencode(query)))


def build_share_url(
    url: str, payload: SharePayload, param: str = DEFAULT_SHARE_PARAM
) -> str:
    """``url`` with its share parameter set to the token for ``payload``."""
    return _replace_query(url, param, encode_share_token(payload))


def clear_share_param(url: str, param: str = DEFAULT_SHARE_PARAM) -> str:
    """``url`` without its share parameter; other parameters are kept."""
    return _replace_query(url, param, None)


def has_share_param(url: str, param: str = DEFAULT_SHARE_PARAM) -> bool:
    return any(k == param for k, _ in parse_qsl(urlsplit(url).query, keep_blank_values=True))


def read_share_config(url: str, param: str = DEFAULT_SHARE_PARAM) -> SharePayload | None:
    """Shared payload carried by ``url``, with its extent normalized.

    Returns None when the parameter is absent or unusable; callers fall
    back to the default view.
    """
    values = [v for k, v in parse_qsl(urlsplit(url).query) if k == param]
    if not values:
        return None

    payload = decode_share_token(values[0])
    if payload is None:
        return None

    extent = normalize_extent(payload.extent)
    if extent is None:
        logger.warning("Shared extent collapses when normalized: %s", payload.extent)
        return None
    return SharePayload(extent=extent, hide_map=payload.hide_map)
