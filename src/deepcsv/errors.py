# -*- coding: utf-8 -*-
from __future__ import annotations

from typing import Any, Optional


# ============================================================
# Errors
# ============================================================
class DecodeError(ValueError):
    pass


class RecordLengthMismatchError(DecodeError):
    """레코드의 토큰 수가 대상 타입이 요구하는 토큰 수와 다를 때."""

    def __init__(self, expected: int, actual: int, path: str = ""):
        self.expected = expected
        self.actual = actual
        self.path = path
        where = f" at {path}" if path else ""
        super().__init__(f"mismatch length of record{where}: expect {expected}, get {actual}")


class FieldCountMismatchError(RecordLengthMismatchError):
    pass


class SchemaError(DecodeError):
    """대상 타입 자체의 결함. 데이터를 바꿔 재시도해도 해결되지 않는다."""
    pass


class FieldNotSettableError(SchemaError):
    def __init__(self, field: str, reason: str = "field is frozen"):
        self.field = field
        super().__init__(f"field {field!r} is not settable: {reason}")


class MissingRepeatCountError(SchemaError):
    def __init__(self, field: str, raw: Any = None):
        self.field = field
        self.raw = raw
        if raw is None:
            detail = "no cap declared"
        else:
            detail = f"cap {raw!r} is not a non-negative integer"
        super().__init__(f"repeated field {field!r}: {detail}")


class UnsupportedFieldKindError(SchemaError):
    def __init__(self, field: str, annotation: Any = None, reason: str = ""):
        self.field = field
        self.annotation = annotation
        msg = f"don't know how to decode field {field!r}"
        if annotation is not None:
            msg += f" of type {annotation!r}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class InvalidScalarError(DecodeError):
    def __init__(self, field: str, token: str, reason: Optional[str] = None):
        self.field = field
        self.token = token
        self.reason = reason or "invalid syntax"
        super().__init__(f"failed in parsing {field!r}: {token!r}: {self.reason}")


class EndOfInput(EOFError):
    """입력 스트림에 더 이상 레코드가 없음. 에러가 아니라 읽기 루프 종료 신호."""
    pass
