# -*- coding: utf-8 -*-
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any, List, Optional, Protocol, Tuple, Type, get_args, get_origin, runtime_checkable

from pydantic import BaseModel
from pydantic.fields import FieldInfo

from .errors import MissingRepeatCountError, UnsupportedFieldKindError
from .scalars import ScalarType, resolve_scalar_type, unwrap_annotation

_COUNT_RE = re.compile(r"\+?[0-9]+")


@runtime_checkable
class CsvUnmarshaler(Protocol):
    """필드 타입이 토큰 하나를 직접 해석하고 싶을 때 구현하는 인터페이스.

    구현 클래스는 인자 없이 생성 가능해야 한다. 디코더는 필드마다 새 인스턴스를
    만든 뒤 ``unmarshal_csv(token)`` 을 호출하고 그 인스턴스를 필드에 넣는다.
    """
    def unmarshal_csv(self, token: str) -> None: ...


@dataclass(frozen=True)
class Cap:
    """반복 필드의 고정 원소 개수::

        related: Annotated[list[int], Cap(6)]

    ``Field(json_schema_extra={"cap": 6})`` 로도 선언할 수 있다.
    """
    count: Any


class FieldKind(str, Enum):
    SCALAR = "scalar"
    NESTED = "nested"
    REPEATED = "repeated"


@dataclass(frozen=True)
class FieldSpec:
    name: str
    kind: FieldKind
    annotation: Any = None
    scalar: Optional[ScalarType] = None  # SCALAR 값 타입 / REPEATED 원소 타입
    model: Optional[Type[BaseModel]] = None  # NESTED
    count: int = 1  # REPEATED 선언 개수
    unmarshaler: Optional[type] = None
    optional: bool = False

    @property
    def span(self) -> int:
        """이 필드가 소비하는 토큰 수."""
        if self.kind is FieldKind.NESTED:
            return count_tokens(self.model)
        if self.kind is FieldKind.REPEATED:
            return self.count
        return 1


@dataclass(frozen=True)
class RecordSchema:
    model: Type[BaseModel]
    fields: Tuple[FieldSpec, ...]

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]


def unmarshaler_type(annotation: Any) -> Optional[type]:
    """어노테이션이 CsvUnmarshaler 구현 클래스면 그 클래스를 반환."""
    base, _, _ = unwrap_annotation(annotation)
    if get_origin(base) is not None or not isinstance(base, type):
        return None
    if issubclass(base, CsvUnmarshaler):
        return base
    return None


def is_model_type(annotation: Any) -> bool:
    return (
        get_origin(annotation) is None
        and isinstance(annotation, type)
        and issubclass(annotation, BaseModel)
    )


def _declared_count(name: str, meta: List[Any], extra: Any) -> int:
    raw = None
    for m in meta:
        if isinstance(m, Cap):
            raw = m.count
    if raw is None and isinstance(extra, dict):
        raw = extra.get("cap")
    if raw is None:
        raise MissingRepeatCountError(name)
    if isinstance(raw, bool):
        raise MissingRepeatCountError(name, raw)
    if isinstance(raw, int):
        if raw < 0:
            raise MissingRepeatCountError(name, raw)
        return raw
    if isinstance(raw, str) and _COUNT_RE.fullmatch(raw):
        return int(raw)
    raise MissingRepeatCountError(name, raw)


def _classify(name: str, info: FieldInfo) -> FieldSpec:
    annotation, meta, optional = unwrap_annotation(info.annotation, info.metadata)

    if annotation is list or get_origin(annotation) is list:
        count = _declared_count(name, meta, info.json_schema_extra)
        args = get_args(annotation)
        if not args:
            raise UnsupportedFieldKindError(name, info.annotation, "list element type is not declared")
        elem = resolve_scalar_type(args[0])
        if elem is None or not (elem.is_integer or elem.kind == "str"):
            raise UnsupportedFieldKindError(
                name, info.annotation, "repeated elements must be integers or strings"
            )
        return FieldSpec(
            name=name, kind=FieldKind.REPEATED, annotation=info.annotation,
            scalar=elem, count=count, optional=optional,
        )

    custom = unmarshaler_type(annotation)
    if custom is not None:
        return FieldSpec(
            name=name, kind=FieldKind.SCALAR, annotation=info.annotation,
            unmarshaler=custom, optional=optional,
        )

    if is_model_type(annotation):
        return FieldSpec(
            name=name, kind=FieldKind.NESTED, annotation=info.annotation,
            model=annotation, optional=optional,
        )

    scalar = resolve_scalar_type(annotation, meta)
    if scalar is None:
        raise UnsupportedFieldKindError(name, info.annotation)
    return FieldSpec(
        name=name, kind=FieldKind.SCALAR, annotation=info.annotation,
        scalar=scalar, optional=optional,
    )


@lru_cache(maxsize=None)
def inspect_model(model: Type[BaseModel]) -> RecordSchema:
    """모델 필드를 선언 순서대로 분류한다. 결과는 모델 클래스별로 캐시된다.

    Raises:
        MissingRepeatCountError: 반복 필드에 cap 선언이 없거나 숫자가 아닐 때
        UnsupportedFieldKindError: 해석할 수 없는 필드 타입
    """
    if not is_model_type(model):
        raise TypeError(f"expected a pydantic model class, got {model!r}")
    fields = tuple(_classify(name, info) for name, info in model.model_fields.items())
    return RecordSchema(model=model, fields=fields)


def _count(model: Type[BaseModel], stack: Tuple[type, ...], path: str) -> int:
    stack = stack + (model,)
    total = 0
    for spec in inspect_model(model).fields:
        if spec.kind is FieldKind.NESTED:
            if spec.model in stack:
                raise UnsupportedFieldKindError(
                    f"{path}{spec.name}", spec.annotation, "self-referencing record has no finite span"
                )
            total += _count(spec.model, stack, f"{path}{spec.name}.")
        else:
            total += spec.span
    return total


@lru_cache(maxsize=None)
def count_tokens(model: Type[BaseModel]) -> int:
    """모델 하나가 소비하는 평탄(flat) 토큰 수.

    스칼라 필드 1, 반복 필드는 선언 개수, 중첩 모델은 재귀적으로 계산한 값.
    """
    return _count(model, (), "")


def column_names(model: Type[BaseModel]) -> List[str]:
    """토큰 순서대로 펼친 컬럼 이름 (``id``, ``deets.tax``, ``related[0]`` ...)."""
    count_tokens(model)
    names: List[str] = []
    for spec in inspect_model(model).fields:
        if spec.kind is FieldKind.NESTED:
            names.extend(f"{spec.name}.{sub}" for sub in column_names(spec.model))
        elif spec.kind is FieldKind.REPEATED:
            names.extend(f"{spec.name}[{n}]" for n in range(spec.count))
        else:
            names.append(spec.name)
    return names
