"""
JavaScript p,a,c,k,e,d unpacker.

Many streaming embed hosts use Dean Edwards' JS packer:
  eval(function(p,a,c,k,e,d){...return p}('<body>',<radix>,<count>,'<words>'.split('|')

Each dictionary word is swapped back in for its radix-encoded token,
highest index first, one whole-word substitution pass per index.
Failures come back as a DecodeFailure value so callers can try another
extraction strategy.
"""
from __future__ import annotations
import re
from typing import Union

from .base import (
    DecodeFailure, PackedPayload,
    PATTERN_NOT_FOUND, INVALID_NUMERIC_PARAMS, DICTIONARY_LENGTH_MISMATCH,
)

ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"

# groups: body quote, body, radix, count, words quote, words
_PACKED_RE = re.compile(
    r"eval\(function\(p,a,c,k,e,[dr]\)\{.*?return p\}\("
    r"(['\"])(.*?)\1,\s*([^,]+?),\s*([^,]+?),\s*(['\"])(.*?)\5\.split\(['\"]\|['\"]\)",
    re.DOTALL,
)
# ASCII only; longer runs cannot describe a real payload
_INT_RE = re.compile(r"-?[0-9]{1,18}")


def base_encode(value: int, radix: int) -> str:
    """Encode a non-negative `value` in `radix` (2..62), lowercase digits first."""
    if not 2 <= radix <= len(ALPHABET):
        raise ValueError(f"unsupported radix {radix}")
    if value < radix:
        return ALPHABET[value]
    digits = []
    while value:
        value, rem = divmod(value, radix)
        digits.append(ALPHABET[rem])
    return "".join(reversed(digits))


def detect(text: str) -> bool:
    """Check if text contains packed JS."""
    return bool(_PACKED_RE.search(text or ""))


def parse_packed(text: str) -> Union[PackedPayload, DecodeFailure]:
    """Pull the packer arguments out of `text`."""
    match = _PACKED_RE.search(text or "")
    if not match:
        return DecodeFailure(PATTERN_NOT_FOUND)

    _, body, radix_s, count_s, _, words = match.groups()
    radix_s, count_s = radix_s.strip(), count_s.strip()
    if not (_INT_RE.fullmatch(radix_s) and _INT_RE.fullmatch(count_s)):
        return DecodeFailure(INVALID_NUMERIC_PARAMS)
    radix, count = int(radix_s), int(count_s)
    if not 2 <= radix <= len(ALPHABET) or count < 0:
        return DecodeFailure(INVALID_NUMERIC_PARAMS)

    dictionary = words.split("|")
    if len(dictionary) != count:
        return DecodeFailure(DICTIONARY_LENGTH_MISMATCH)

    return PackedPayload(packed_body=body, radix=radix, token_count=count, dictionary=dictionary)


def decode(payload: PackedPayload) -> str:
    body = payload.packed_body
    for idx in range(payload.token_count - 1, -1, -1):
        word = payload.dictionary[idx]
        if not word:
            continue
        token = base_encode(idx, payload.radix)
        pattern = re.compile(r"\b" + re.escape(token) + r"\b", re.ASCII)
        body = pattern.sub(lambda _m, w=word: w, body)
    return body


def deobfuscate(text: str) -> Union[str, DecodeFailure]:
    """Unpack the first packed block in `text`, or return a DecodeFailure."""
    payload = parse_packed(text)
    if isinstance(payload, DecodeFailure):
        return payload
    return decode(payload)


def unpack(text: str) -> str:
    """Unpack packed JS. Returns the unpacked source or the original text."""
    result = deobfuscate(text)
    if isinstance(result, DecodeFailure):
        return text
    return result
