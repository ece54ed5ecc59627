# -*- coding: utf-8 -*-
"""토큰 시퀀스 -> pydantic 모델 인스턴스.

- ``decode_flat``: 필드 하나당 토큰 하나. 중첩/반복 없음.
- ``decode_nested``: 스키마를 따라 중첩 모델과 고정 길이 반복 필드까지 채운다.

두 함수 모두 대상 인스턴스를 제자리에서 수정하며, 에러가 나면 그 자리에서
중단한다 (이미 쓴 필드는 되돌리지 않는다).
"""
from __future__ import annotations

from typing import Any, Dict, Iterator, Sequence, Tuple, Type, TypeVar, get_origin

from pydantic import BaseModel, ValidationError

from .errors import (
    DecodeError,
    FieldCountMismatchError,
    FieldNotSettableError,
    InvalidScalarError,
    RecordLengthMismatchError,
    UnsupportedFieldKindError,
)
from .scalars import coerce, resolve_scalar_type, unwrap_annotation, zero_value
from .schema import FieldKind, FieldSpec, count_tokens, inspect_model, is_model_type, unmarshaler_type

M = TypeVar("M", bound=BaseModel)


# ---------------- Allocation ----------------
def _zero_for(annotation: Any, metadata: Any, stack: Tuple[type, ...]) -> Any:
    base, meta, optional = unwrap_annotation(annotation, metadata)
    if optional:
        return None
    if base is list or get_origin(base) is list:
        return []
    if unmarshaler_type(base) is not None:
        return None
    if is_model_type(base):
        if base in stack:
            return None
        return base.model_construct(**_zero_fields(base, stack))
    scalar = resolve_scalar_type(base, meta)
    return zero_value(scalar) if scalar is not None else None


def _zero_fields(model: Type[BaseModel], stack: Tuple[type, ...]) -> Dict[str, Any]:
    stack = stack + (model,)
    return {
        name: _zero_for(info.annotation, info.metadata, stack)
        for name, info in model.model_fields.items()
    }


def zero_instance(model: Type[M]) -> M:
    """검증 없이 0 값으로 채운 새 인스턴스.

    정수 0, 실수 0.0, 문자열 "", 반복 필드 [], 중첩 모델은 그 모델의 0 인스턴스,
    Optional/CsvUnmarshaler 필드는 None.
    """
    return model.model_construct(**_zero_fields(model, ()))


# ---------------- Field writes ----------------
def _require_model(dest: Any) -> None:
    if not isinstance(dest, BaseModel):
        raise TypeError(f"decode expects a pydantic model instance as destination, got {type(dest).__name__}")


def _check_settable(dest: BaseModel, name: str, path: str) -> None:
    model = type(dest)
    if model.model_config.get("frozen"):
        raise FieldNotSettableError(path, f"model {model.__name__} is frozen")
    if model.model_fields[name].frozen:
        raise FieldNotSettableError(path)


def _set(dest: BaseModel, name: str, value: Any, path: str, token: str) -> None:
    try:
        setattr(dest, name, value)
    except ValidationError as exc:
        # validate_assignment=True 인 모델의 제약 위반
        raise InvalidScalarError(path, token, str(exc)) from exc


def _unmarshal(custom: type, token: str, path: str) -> Any:
    try:
        value = custom()
    except TypeError as exc:
        raise FieldNotSettableError(path, f"cannot construct {custom.__name__}: {exc}") from exc
    try:
        value.unmarshal_csv(token)
    except DecodeError:
        raise
    except ValueError as exc:
        raise InvalidScalarError(path, token, str(exc)) from exc
    return value


# ---------------- Flat ----------------
def _flat_value(name: str, info: Any, token: str) -> Any:
    custom = unmarshaler_type(info.annotation)
    if custom is not None:
        return _unmarshal(custom, token, name)
    scalar = resolve_scalar_type(info.annotation, info.metadata)
    if scalar is None:
        raise UnsupportedFieldKindError(name, info.annotation)
    return coerce(scalar, token, name)


def _flat_values(tokens: Sequence[str], model: Type[BaseModel]) -> Dict[str, Any]:
    fields = model.model_fields
    if len(tokens) != len(fields):
        raise FieldCountMismatchError(len(fields), len(tokens))
    return {
        name: _flat_value(name, info, token)
        for (name, info), token in zip(fields.items(), tokens)
    }


def decode_flat(tokens: Sequence[str], dest: BaseModel) -> None:
    """필드 하나에 토큰 하나씩, 선언 순서대로 채운다.

    Raises:
        FieldCountMismatchError: 토큰 수 != 필드 수 (아무 필드도 쓰지 않음)
        FieldNotSettableError: frozen 모델/필드
        InvalidScalarError: 토큰 해석 실패
        UnsupportedFieldKindError: 스칼라가 아닌 필드 (중첩/반복 포함)
    """
    _require_model(dest)
    fields = type(dest).model_fields
    if len(tokens) != len(fields):
        raise FieldCountMismatchError(len(fields), len(tokens))

    for (name, info), token in zip(fields.items(), tokens):
        _check_settable(dest, name, name)
        _set(dest, name, _flat_value(name, info, token), name, token)


# ---------------- Nested ----------------
def _field_value(spec: FieldSpec, chunk: Sequence[str], where: str) -> Any:
    if spec.kind is FieldKind.NESTED:
        # 새로 만드는 하위 레코드라 frozen 여부와 무관하게 한 번에 구성
        return spec.model.model_construct(**_collect(chunk, spec.model, f"{where}."))
    if spec.kind is FieldKind.REPEATED:
        return [coerce(spec.scalar, chunk[n], f"{where}[{n}]") for n in range(spec.count)]
    if spec.kind is FieldKind.SCALAR and spec.unmarshaler is not None:
        return _unmarshal(spec.unmarshaler, chunk[0], where)
    if spec.kind is FieldKind.SCALAR:
        return coerce(spec.scalar, chunk[0], where)
    raise UnsupportedFieldKindError(where, spec.annotation)


def _check_span(tokens: Sequence[str], model: Type[BaseModel], path: str) -> None:
    expected = count_tokens(model)
    if len(tokens) != expected:
        raise RecordLengthMismatchError(expected, len(tokens), path.rstrip("."))


def _chunks(tokens: Sequence[str], model: Type[BaseModel]) -> Iterator[Tuple[FieldSpec, Sequence[str]]]:
    j = 0  # 토큰 커서. 필드 인덱스와 별개로 필드 span 만큼 전진한다.
    for spec in inspect_model(model).fields:
        yield spec, tokens[j:j + spec.span]
        j += spec.span


def _collect(tokens: Sequence[str], model: Type[BaseModel], path: str) -> Dict[str, Any]:
    _check_span(tokens, model, path)
    return {
        spec.name: _field_value(spec, chunk, f"{path}{spec.name}")
        for spec, chunk in _chunks(tokens, model)
    }


def decode_nested(tokens: Sequence[str], dest: BaseModel) -> None:
    """스키마 전체를 평탄한 토큰 시퀀스 하나로부터 채운다.

    토큰 수는 ``count_tokens(type(dest))`` 와 정확히 같아야 하며, 중첩 모델마다
    자기 구간 길이를 다시 검사한다. 중첩 필드는 매번 새 인스턴스로 교체된다.

    Raises:
        RecordLengthMismatchError: 토큰 수 불일치 (아무 필드도 쓰지 않음)
        MissingRepeatCountError / UnsupportedFieldKindError: 스키마 결함
        FieldNotSettableError: ``dest`` 가 frozen 모델이거나 frozen 필드를 가짐
        InvalidScalarError: 토큰 해석 실패 (필드 경로 포함)
    """
    _require_model(dest)
    model = type(dest)
    _check_span(tokens, model, "")
    for spec, chunk in _chunks(tokens, model):
        _check_settable(dest, spec.name, spec.name)
        value = _field_value(spec, chunk, spec.name)
        _set(dest, spec.name, value, spec.name, ",".join(chunk))


def decode_model(tokens: Sequence[str], model: Type[M], nested: bool = True) -> M:
    """토큰으로 새 인스턴스를 만들어 반환. 호출자 소유 객체는 건드리지 않는다.

    값을 모두 모은 뒤 ``model_construct`` 로 한 번에 만들기 때문에 frozen 모델도
    디코딩할 수 있다.
    """
    if not (isinstance(model, type) and issubclass(model, BaseModel)):
        raise TypeError(f"decode_model expects a pydantic model class, got {model!r}")
    if nested:
        return model.model_construct(**_collect(tokens, model, ""))
    return model.model_construct(**_flat_values(tokens, model))
