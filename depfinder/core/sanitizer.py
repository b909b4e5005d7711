"""
Response body normalization for depfinder.

Some feeds wrap their payloads in zero-width or byte-order-mark
characters, which strict XML and JSON parsers reject.
"""

from __future__ import annotations

from typing import Union

from depfinder.constants import ZERO_WIDTH_CHARACTERS


def sanitize_response(raw: Union[bytes, str]) -> str:
    """Decode a response body and strip one wrapping invisible marker per end.

    Args:
        raw: Body as received. Bytes are decoded as UTF-8 with undecodable
            sequences replaced.

    Returns:
        Text ready for structured parsing.
    """
    text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw

    if text[:1] and text[0] in ZERO_WIDTH_CHARACTERS:
        text = text[1:]
    if text[-1:] and text[-1] in ZERO_WIDTH_CHARACTERS:
        text = text[:-1]
    return text
