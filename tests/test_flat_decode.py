from __future__ import annotations

import pytest
from pydantic import BaseModel, ConfigDict, Field

from deepcsv import (
    FieldCountMismatchError,
    FieldNotSettableError,
    Float32,
    InvalidScalarError,
    RecordLengthMismatchError,
    UInt16,
    UnsupportedFieldKindError,
    decode_flat,
    decode_model,
    zero_instance,
)


class T(BaseModel):
    f1: int
    f2: int
    f3: Float32
    f4: str


class Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)

    a: int


class FrozenField(BaseModel):
    a: int
    b: int = Field(default=0, frozen=True)


class Inner(BaseModel):
    x: int


class HasNested(BaseModel):
    a: int
    inner: Inner


class Celsius:
    """숫자 필드처럼 보이지만 원문 토큰을 직접 해석한다."""

    def __init__(self):
        self.raw = None
        self.degrees = 0.0

    def unmarshal_csv(self, token: str) -> None:
        self.raw = token
        self.degrees = float(token.strip().rstrip("C"))


class Reading(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    sensor: UInt16
    temp: Celsius


class HexCount(int):
    """int 하위 클래스지만 16진 원문 토큰을 직접 해석한다."""

    def unmarshal_csv(self, token: str) -> None:
        self.raw = token
        self.count = int(token, 16)


class Counter(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    hits: HexCount


def test_decode_flat_row():
    t = zero_instance(T)
    decode_flat(["1", "2", "3", "test"], t)
    assert (t.f1, t.f2, t.f3, t.f4) == (1, 2, 3.0, "test")


def test_same_instance_is_overwritten():
    t = zero_instance(T)
    decode_flat(["1", "2", "3", "test"], t)
    decode_flat(["4", "5", "6", "another_test"], t)
    assert (t.f1, t.f2, t.f3, t.f4) == (4, 5, 6.0, "another_test")


def test_field_count_mismatch_writes_nothing():
    t = zero_instance(T)
    with pytest.raises(FieldCountMismatchError) as ei:
        decode_flat(["1", "2", "3"], t)
    assert isinstance(ei.value, RecordLengthMismatchError)
    assert (ei.value.expected, ei.value.actual) == (4, 3)
    assert t.model_dump() == zero_instance(T).model_dump()


def test_empty_numeric_tokens_are_zero():
    t = zero_instance(T)
    decode_flat(["", "", "", ""], t)
    assert (t.f1, t.f2, t.f3, t.f4) == (0, 0, 0.0, "")


def test_first_error_stops_the_walk():
    t = zero_instance(T)
    with pytest.raises(InvalidScalarError) as ei:
        decode_flat(["1", "x", "3", "a"], t)
    assert ei.value.field == "f2"
    assert t.f1 == 1
    assert t.f2 == 0
    assert t.f3 == 0.0
    assert t.f4 == ""


def test_frozen_model_is_not_settable():
    dest = Frozen(a=5)
    with pytest.raises(FieldNotSettableError):
        decode_flat(["1"], dest)
    assert dest.a == 5


def test_frozen_field_is_not_settable():
    dest = zero_instance(FrozenField)
    with pytest.raises(FieldNotSettableError) as ei:
        decode_flat(["1", "2"], dest)
    assert ei.value.field == "b"
    assert dest.a == 1


def test_nested_field_is_unsupported_in_flat_mode():
    dest = zero_instance(HasNested)
    with pytest.raises(UnsupportedFieldKindError) as ei:
        decode_flat(["1", "2"], dest)
    assert ei.value.field == "inner"
    assert dest.a == 1


def test_custom_capability_receives_raw_token():
    dest = zero_instance(Reading)
    decode_flat(["7", " 21.5C"], dest)
    assert dest.sensor == 7
    assert isinstance(dest.temp, Celsius)
    assert dest.temp.raw == " 21.5C"
    assert dest.temp.degrees == 21.5


def test_custom_capability_wins_over_numeric_kind():
    dest = zero_instance(Counter)
    decode_flat(["0x2A"], dest)
    assert isinstance(dest.hits, HexCount)
    assert dest.hits.raw == "0x2A"
    assert dest.hits.count == 42

    nested = decode_model(["ff"], Counter)
    assert nested.hits.raw == "ff"
    assert nested.hits.count == 255


def test_custom_capability_errors_are_wrapped():
    dest = zero_instance(Reading)
    with pytest.raises(InvalidScalarError) as ei:
        decode_flat(["7", "warm"], dest)
    assert ei.value.field == "temp"
    assert isinstance(ei.value.__cause__, ValueError)


def test_destination_must_be_a_model():
    with pytest.raises(TypeError):
        decode_flat(["1"], {"a": None})
