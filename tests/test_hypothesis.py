"""
Property-based tests.

- scalar round trip: format then coerce gives the same value
- span: count_tokens equals the per-field sum for generated schemas
- decode consumes tokens in column order and rejects off-by-one lengths
"""
from __future__ import annotations

from typing import Annotated, Any, List

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st
from pydantic import BaseModel, create_model

from deepcsv import (
    Cap,
    Float32,
    Int8,
    Int16,
    Int32,
    Int64,
    RecordLengthMismatchError,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
    coerce,
    count_tokens,
    decode_nested,
    inspect_model,
    zero_instance,
)
from deepcsv.scalars import format_scalar, resolve_scalar_type
from deepcsv.schema import FieldKind

INT_CASES = [
    (Int8, st.integers(-(2**7), 2**7 - 1)),
    (Int16, st.integers(-(2**15), 2**15 - 1)),
    (Int32, st.integers(-(2**31), 2**31 - 1)),
    (Int64, st.integers(-(2**63), 2**63 - 1)),
    (UInt8, st.integers(0, 2**8 - 1)),
    (UInt16, st.integers(0, 2**16 - 1)),
    (UInt32, st.integers(0, 2**32 - 1)),
    (UInt64, st.integers(0, 2**64 - 1)),
    (int, st.integers()),
]


@pytest.mark.parametrize("annotation,values", INT_CASES)
def test_integer_round_trip(annotation, values):
    scalar = resolve_scalar_type(annotation)

    @given(values)
    def check(v):
        assert coerce(scalar, format_scalar(scalar, v)) == v

    check()


@given(st.floats(allow_nan=False))
def test_float64_round_trip(v):
    scalar = resolve_scalar_type(float)
    assert coerce(scalar, format_scalar(scalar, v)) == v


@given(st.floats(width=32, allow_nan=False))
def test_float32_round_trip(v):
    scalar = resolve_scalar_type(Float32)
    assert coerce(scalar, format_scalar(scalar, v)) == v


@given(st.text())
def test_string_round_trip(s):
    assert coerce(str, s) == s


@given(st.integers(), st.sampled_from([int, Int64, UInt8, float, Float32]))
def test_empty_token_never_errors(_, annotation):
    assert coerce(annotation, "") == 0


# ---------------- generated schemas ----------------
field_shapes = st.lists(
    st.one_of(
        st.just(("scalar", 1)),
        st.tuples(st.just("repeated"), st.integers(0, 4)),
        st.tuples(st.just("nested"), st.integers(1, 3)),
    ),
    min_size=1,
    max_size=6,
)


def _build(shapes) -> Any:
    fields = {}
    for i, (kind, n) in enumerate(shapes):
        if kind == "scalar":
            fields[f"f{i}"] = (int, ...)
        elif kind == "repeated":
            fields[f"f{i}"] = (Annotated[list[int], Cap(n)], ...)
        else:
            sub = create_model(f"Sub{i}", **{f"s{k}": (int, ...) for k in range(n)})
            fields[f"f{i}"] = (sub, ...)
    return create_model("Generated", **fields)


def _flatten(dest: BaseModel) -> List[int]:
    out: List[int] = []
    for spec in inspect_model(type(dest)).fields:
        value = getattr(dest, spec.name)
        if spec.kind is FieldKind.NESTED:
            out.extend(_flatten(value))
        elif spec.kind is FieldKind.REPEATED:
            out.extend(value)
        else:
            out.append(value)
    return out


@settings(max_examples=50)
@given(field_shapes)
def test_span_is_sum_of_field_contributions(shapes):
    model = _build(shapes)
    assert count_tokens(model) == sum(n for _, n in shapes)


@settings(max_examples=50)
@given(field_shapes)
def test_decode_places_tokens_in_column_order(shapes):
    model = _build(shapes)
    n = count_tokens(model)
    dest = zero_instance(model)
    decode_nested([str(i) for i in range(n)], dest)
    assert _flatten(dest) == list(range(n))


@settings(max_examples=50)
@given(field_shapes, st.sampled_from([-1, 1]))
def test_off_by_one_length_always_rejected(shapes, delta):
    model = _build(shapes)
    n = count_tokens(model)
    if n + delta < 0:
        return
    dest = zero_instance(model)
    before = dest.model_dump()
    with pytest.raises(RecordLengthMismatchError):
        decode_nested(["0"] * (n + delta), dest)
    assert dest.model_dump() == before
