# -*- coding: utf-8 -*-
"""단일 토큰 -> 스칼라 값 변환.

정수/실수 폭(width)은 ``typing.Annotated`` 마커로 표현한다::

    class Row(BaseModel):
        id: Int64
        flags: UInt8
        ratio: Float32
        name: str

``int`` 는 폭 제한이 없는 부호 있는 정수, ``float`` 는 64비트 실수다.
"""
from __future__ import annotations

import math
import re
import struct
import types
from dataclasses import dataclass
from typing import Annotated, Any, Iterable, List, Optional, Tuple, Union, get_args, get_origin

from .errors import InvalidScalarError, UnsupportedFieldKindError

_INT_RE = re.compile(r"[+-]?[0-9]+")
_UINT_RE = re.compile(r"[0-9]+")
_FLOAT_RE = re.compile(
    r"[+-]?(?:(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf(?:inity)?)|nan",
    flags=re.IGNORECASE,
)
# 16진 실수는 지수부(p)가 필수
_HEX_FLOAT_RE = re.compile(
    r"[+-]?0x(?:[0-9a-f]+(?:\.[0-9a-f]*)?|\.[0-9a-f]+)p[+-]?[0-9]+",
    flags=re.IGNORECASE,
)
_INF_RE = re.compile(r"[+-]?inf(?:inity)?", flags=re.IGNORECASE)
_F32 = struct.Struct("<f")

_INT_WIDTHS = frozenset({0, 8, 16, 32, 64})
_FLOAT_WIDTHS = frozenset({32, 64})


@dataclass(frozen=True)
class IntWidth:
    """정수 필드의 비트 폭. 0이면 제한 없음."""
    bits: int = 0
    signed: bool = True


@dataclass(frozen=True)
class FloatWidth:
    bits: int = 64


@dataclass(frozen=True)
class ScalarType:
    kind: str  # "int" | "uint" | "float" | "str"
    bits: int = 0

    @property
    def is_integer(self) -> bool:
        return self.kind in ("int", "uint")

    def __str__(self) -> str:
        if self.kind == "str":
            return "str"
        return f"{self.kind}{self.bits or ''}"


STRING = ScalarType("str")

Int = Annotated[int, IntWidth(0)]
Int8 = Annotated[int, IntWidth(8)]
Int16 = Annotated[int, IntWidth(16)]
Int32 = Annotated[int, IntWidth(32)]
Int64 = Annotated[int, IntWidth(64)]
UInt = Annotated[int, IntWidth(0, signed=False)]
UInt8 = Annotated[int, IntWidth(8, signed=False)]
UInt16 = Annotated[int, IntWidth(16, signed=False)]
UInt32 = Annotated[int, IntWidth(32, signed=False)]
UInt64 = Annotated[int, IntWidth(64, signed=False)]
Float32 = Annotated[float, FloatWidth(32)]
Float64 = Annotated[float, FloatWidth(64)]


def unwrap_annotation(annotation: Any, metadata: Iterable[Any] = ()) -> Tuple[Any, List[Any], bool]:
    """``Annotated`` / ``Optional`` 을 벗겨 (기본 타입, 메타데이터, optional 여부)를 반환."""
    meta = list(metadata)
    optional = False
    while True:
        origin = get_origin(annotation)
        if origin is Annotated:
            base, *extra = get_args(annotation)
            meta.extend(extra)
            annotation = base
            continue
        if origin is Union or origin is types.UnionType:
            args = get_args(annotation)
            non_null = [a for a in args if a is not type(None)]
            if len(non_null) == 1 and len(args) == 2:
                optional = True
                annotation = non_null[0]
                continue
        return annotation, meta, optional


def _last(meta: List[Any], cls: type) -> Any:
    found = None
    for m in meta:
        if isinstance(m, cls):
            found = m
    return found


def resolve_scalar_type(annotation: Any, metadata: Iterable[Any] = ()) -> Optional[ScalarType]:
    """지원하는 스칼라 타입이면 ScalarType, 아니면 None.

    bool, IntEnum 등 int 의 서브클래스는 지원하지 않는다.
    """
    base, meta, _ = unwrap_annotation(annotation, metadata)
    if base is str:
        return STRING
    if base is int:
        width = _last(meta, IntWidth) or IntWidth()
        if width.bits not in _INT_WIDTHS:
            return None
        return ScalarType("int" if width.signed else "uint", width.bits)
    if base is float:
        fwidth = _last(meta, FloatWidth) or FloatWidth()
        if fwidth.bits not in _FLOAT_WIDTHS:
            return None
        return ScalarType("float", fwidth.bits)
    return None


def zero_value(scalar: ScalarType) -> Any:
    if scalar.kind == "str":
        return ""
    if scalar.kind == "float":
        return 0.0
    return 0


def _int_bounds(scalar: ScalarType) -> Tuple[int, int]:
    if scalar.kind == "uint":
        return 0, (1 << scalar.bits) - 1
    half = 1 << (scalar.bits - 1)
    return -half, half - 1


def _parse_int(scalar: ScalarType, token: str, field: str) -> int:
    pattern = _INT_RE if scalar.kind == "int" else _UINT_RE
    if not pattern.fullmatch(token):
        raise InvalidScalarError(field, token)
    try:
        value = int(token)
    except ValueError as exc:
        # int max str digits 초과
        raise InvalidScalarError(field, token, str(exc)) from exc
    if scalar.bits:
        lo, hi = _int_bounds(scalar)
        if not lo <= value <= hi:
            raise InvalidScalarError(field, token, "value out of range")
    return value


def _parse_float(scalar: ScalarType, token: str, field: str) -> float:
    if _HEX_FLOAT_RE.fullmatch(token):
        try:
            value = float.fromhex(token)
        except OverflowError as exc:
            raise InvalidScalarError(field, token, "value out of range") from exc
    elif _FLOAT_RE.fullmatch(token):
        value = float(token)
    else:
        raise InvalidScalarError(field, token)
    if math.isinf(value) and not _INF_RE.fullmatch(token):
        raise InvalidScalarError(field, token, "value out of range")
    if scalar.bits == 32:
        try:
            value = _F32.unpack(_F32.pack(value))[0]
        except OverflowError as exc:
            raise InvalidScalarError(field, token, "value out of range") from exc
    return value


def coerce(target: Any, token: str, field: str = "") -> Any:
    """토큰 하나를 ``target`` 스칼라 타입 값으로 변환.

    Args:
        target: ScalarType 또는 타입 어노테이션 (``int``, ``Int8``, ``str`` ...)
        token: CSV 필드 원문
        field: 에러 메시지에 쓸 필드 경로

    Raises:
        InvalidScalarError: 토큰을 해당 타입으로 해석할 수 없을 때
        UnsupportedFieldKindError: 지원하지 않는 타입일 때
    """
    scalar = target if isinstance(target, ScalarType) else resolve_scalar_type(target)
    if scalar is None:
        raise UnsupportedFieldKindError(field, target)
    if scalar.kind == "str":
        return token
    # 빈 토큰은 0 값
    if token == "":
        return zero_value(scalar)
    if scalar.is_integer:
        return _parse_int(scalar, token, field)
    return _parse_float(scalar, token, field)


def format_scalar(scalar: ScalarType, value: Any) -> str:
    """coerce 의 역변환. ``coerce(t, format_scalar(t, v)) == v``."""
    if scalar.kind == "float":
        return repr(float(value))
    return str(value)
