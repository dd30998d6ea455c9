"""RFC 3986 character classes and percent-encoding.

Expansion policies decide *which* characters survive unencoded; this module
does the byte-level work. Characters outside the allowed set are encoded
as UTF-8 and each byte is written as ``%XX`` with upper-case hex digits.

Two allowed sets exist:

* **unreserved** -- ``A-Z a-z 0-9 - . _ ~``. Used by every operator except
  ``+`` and ``#``.
* **unreserved + reserved** -- adds the general delimiters ``:/?#[]@`` and the
  sub-delimiters ``!$&'()*+,;=``. When reserved characters are allowed,
  existing pct-triplets (``%2F``) are copied through as well.
"""

from __future__ import annotations

import re

GENERAL_DELIMITERS = frozenset(":/?#[]@")
SUB_DELIMITERS = frozenset("!$&'()*+,;=")
RESERVED = GENERAL_DELIMITERS | SUB_DELIMITERS

_UNRESERVED_RE = re.compile(r"[A-Za-z0-9\-._~]")
_PCT_TRIPLET_RE = re.compile(r"%[0-9A-Fa-f]{2}")


def is_unreserved(character: str) -> bool:
    """Return ``True`` for ``ALPHA / DIGIT / "-" / "." / "_" / "~"``."""
    return len(character) == 1 and _UNRESERVED_RE.fullmatch(character) is not None


def is_reserved(character: str) -> bool:
    """Return ``True`` for RFC 3986 general and sub delimiters."""
    return character in RESERVED


def is_allowed(character: str, allow_reserved: bool) -> bool:
    """Return whether *character* may appear unencoded under the given rule."""
    if is_unreserved(character):
        return True
    return allow_reserved and is_reserved(character)


def is_pct_encoded(value: str, allow_reserved: bool = False) -> bool:
    """Determine if *value* is already percent-encoded.

    A value qualifies when it contains at least one pct-triplet and every
    character outside those triplets is allowed by the active rule. Such a
    value is emitted as-is instead of being encoded a second time.

    Example::

        >>> is_pct_encoded("Hello%20World")
        True
        >>> is_pct_encoded("50%")
        False
        >>> is_pct_encoded("a%20b c")
        False
    """
    if _PCT_TRIPLET_RE.search(value) is None:
        return False
    remainder = _PCT_TRIPLET_RE.sub("", value)
    return all(is_allowed(ch, allow_reserved) for ch in remainder)


def pct_encode_char(character: str) -> str:
    """Percent-encode every UTF-8 byte of *character*."""
    return "".join(f"%{byte:02X}" for byte in character.encode("utf-8"))


def pct_encode(value: str, allow_reserved: bool = False) -> str:
    """Percent-encode *value* for inclusion in a URI.

    Args:
        value: The raw string to encode.
        allow_reserved: When ``True``, reserved characters and existing
            pct-triplets are copied through unchanged.

    Returns:
        The encoded string. Values that :func:`is_pct_encoded` accepts are
        returned untouched.
    """
    if is_pct_encoded(value, allow_reserved):
        return value

    result: list[str] = []
    index = 0
    length = len(value)
    while index < length:
        character = value[index]
        if allow_reserved and character == "%":
            triplet = _PCT_TRIPLET_RE.match(value, index)
            if triplet is not None:
                result.append(triplet.group(0))
                index = triplet.end()
                continue
        if is_allowed(character, allow_reserved):
            result.append(character)
        else:
            result.append(pct_encode_char(character))
        index += 1
    return "".join(result)
