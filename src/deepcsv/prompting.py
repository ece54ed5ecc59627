# -*- coding: utf-8 -*-
from __future__ import annotations

from typing import Iterator, List, Optional, Tuple, Type

from pydantic import BaseModel

from .reader import DEFAULT_READER_CONFIG, ReaderConfig
from .scalars import ScalarType, format_scalar
from .schema import FieldKind, FieldSpec, count_tokens, inspect_model


def _type_label(spec: FieldSpec) -> str:
    if spec.unmarshaler is not None:
        return spec.unmarshaler.__name__
    return str(spec.scalar)


def _dummy_token(spec: FieldSpec) -> str:
    scalar: Optional[ScalarType] = spec.scalar
    if scalar is None or scalar.kind == "str":
        return "text"
    if scalar.kind == "float":
        return format_scalar(scalar, 0.5)
    return format_scalar(scalar, 1)


def _columns(model: Type[BaseModel], prefix: str = "") -> Iterator[Tuple[str, str, str]]:
    """(컬럼 이름, 타입 라벨, 예시 토큰)을 토큰 순서대로."""
    for spec in inspect_model(model).fields:
        name = f"{prefix}{spec.name}"
        if spec.kind is FieldKind.NESTED:
            yield from _columns(spec.model, f"{name}.")
        elif spec.kind is FieldKind.REPEATED:
            for n in range(spec.count):
                yield f"{name}[{n}]", str(spec.scalar), _dummy_token(spec)
        else:
            yield name, _type_label(spec), _dummy_token(spec)


def build_csv_format_prompt(model: Type[BaseModel], cfg: Optional[ReaderConfig] = None) -> str:
    """모델 스키마를 펼친 컬럼 목록으로 CSV 한 줄 출력 지시문을 만든다."""
    cfg = cfg or DEFAULT_READER_CONFIG
    total = count_tokens(model)
    cols = list(_columns(model))

    out: List[str] = []
    out.append(
        f"You must output exactly ONE CSV row with {total} fields separated by "
        f"{cfg.delimiter!r}, in this column order:"
    )
    for idx, (name, label, _) in enumerate(cols, start=1):
        out.append(f"  {idx}. {name} ({label})")
    out.append("")
    out.append("RULES:")
    out.append("- DO NOT output a header row or any explanation")
    out.append(f"- Wrap a field in {cfg.quotechar} if it contains the delimiter, a quote or a newline")
    out.append("- Leave a numeric field empty to mean 0")
    out.append("")
    out.append("Example:")
    out.append(cfg.delimiter.join(token for _, _, token in cols))
    return "\n".join(out)
