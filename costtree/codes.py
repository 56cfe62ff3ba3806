"""Sequence code cleaning, validation and canonical formatting.

Cost sheets number their items inconsistently: top-level groups are often
written with Chinese numerals (``一``, ``（二）``), nested items use dotted
Arabic codes of uneven width (``1.1``, ``1.10``, ``2.003``).  The helpers in
this module turn such labels into canonical codes where the first segment
keeps its source width and every following segment is padded to three digits,
so ``1.10`` becomes ``1.010``.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Optional, Tuple

import cn2an

logger = logging.getLogger(__name__)

ROOT_CODE = "0"
SEGMENT_WIDTH = 3
CHINESE_NUMERAL_GLYPHS = "零一二三四五六七八九十百千万亿"

NumeralDecoder = Callable[[str], str]

_STRIP_PATTERN = re.compile(r"[（）()\s、]")
_VALID_PATTERN = re.compile(r"^\d+(\.\d+)*$")


def clean_sequence(value: object) -> str:
    """Remove parentheses, whitespace and ideographic commas from a label."""

    text = "" if value is None else str(value)
    return _STRIP_PATTERN.sub("", text)


def contains_chinese_numeral(text: str) -> bool:
    return any(char in CHINESE_NUMERAL_GLYPHS for char in text or "")


def decode_chinese_numeral(text: str) -> str:
    """Decode a Chinese numeral string into its decimal representation."""

    value = cn2an.cn2an(text, "smart")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def is_valid_sequence(text: str) -> bool:
    return bool(text) and _VALID_PATTERN.match(text) is not None


def format_sequence_code(text: str) -> str:
    parts = text.split(".")
    return ".".join([parts[0], *(part.zfill(SEGMENT_WIDTH) for part in parts[1:])])


def normalize_code(
    raw: object, decoder: Optional[NumeralDecoder] = None
) -> Optional[str]:
    """Return the canonical code for ``raw`` or ``None`` when it is rejected."""

    cleaned = clean_sequence(raw)
    if not cleaned:
        return None

    if contains_chinese_numeral(cleaned):
        decode = decoder or decode_chinese_numeral
        try:
            cleaned = str(decode(cleaned)).strip()
        except (ValueError, TypeError, KeyError) as exc:
            logger.debug("Unable to decode numeral label %r: %s", raw, exc)
            return None

    if not is_valid_sequence(cleaned):
        return None
    return format_sequence_code(cleaned)


def parent_code(code: str) -> str:
    """Drop the last dotted segment; single segment codes hang off the root."""

    if "." not in code:
        return ROOT_CODE
    return code.rsplit(".", 1)[0]


def is_top_level(code: str) -> bool:
    return code != ROOT_CODE and "." not in code


def code_sort_key(code: str) -> Tuple[int, ...]:
    """Numeric sort key, so ``1`` < ``2`` < ``10`` regardless of padding."""

    if not code:
        return ()
    key = []
    for part in code.split("."):
        try:
            key.append(int(part))
        except ValueError:
            key.append(0)
    return tuple(key)


__all__ = [
    "CHINESE_NUMERAL_GLYPHS",
    "NumeralDecoder",
    "ROOT_CODE",
    "clean_sequence",
    "code_sort_key",
    "contains_chinese_numeral",
    "decode_chinese_numeral",
    "format_sequence_code",
    "is_top_level",
    "is_valid_sequence",
    "normalize_code",
    "parent_code",
]
