"""Conversion between UTF-16 code-unit offsets and code-point offsets.

Browser selections report UTF-16 offsets while Python strings index by code
point. Characters outside the Basic Multilingual Plane take two code units, so
every offset coming from a UI selection has to pass through here before it is
used for slicing.
"""
from revision_compare.core.errors import AddressingFault


def _units(char: str) -> int:
    return 2 if ord(char) > 0xFFFF else 1


def code_unit_length(text: str) -> int:
    """Length of ``text`` in UTF-16 code units."""
    return sum(_units(char) for char in text)


def to_code_point_offset(text: str, code_unit_offset: int) -> int:
    """
    将UTF-16偏移量转换为码点偏移量

    Args:
        text: 文本
        code_unit_offset: UTF-16边界偏移量

    Returns:
        边界之前的完整码点数量

    Raises:
        AddressingFault: 偏移量越界或落在代理对中间
    """
    if code_unit_offset < 0:
        raise AddressingFault("negative code unit offset", offset=code_unit_offset)

    units = 0
    for index, char in enumerate(text):
        if units == code_unit_offset:
            return index
        units += _units(char)
        if units > code_unit_offset:
            raise AddressingFault(
                "code unit offset splits a surrogate pair",
                offset=code_unit_offset,
                length=code_unit_length(text),
            )

    if units == code_unit_offset:
        return len(text)
    raise AddressingFault("code unit offset out of range", offset=code_unit_offset, length=units)


def to_code_unit_offset(text: str, code_point_offset: int) -> int:
    """将码点偏移量转换回UTF-16偏移量"""
    if not 0 <= code_point_offset <= len(text):
        raise AddressingFault("code point offset out of range", offset=code_point_offset, length=len(text))
    return code_unit_length(text[:code_point_offset])
