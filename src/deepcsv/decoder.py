# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
from typing import Callable, Iterator, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel

from .decoding import decode_flat, decode_model, decode_nested
from .errors import DecodeError, EndOfInput
from .reader import ReaderConfig, RecordReader, Source
from .security import RawLogPolicy, safe_row_preview

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)
R = TypeVar("R")


class Decoder:
    """CSV 스트림에서 레코드를 하나씩 읽어 모델에 디코딩한다.

    Usage:
        dec = Decoder(open("goods.csv", newline=""))
        good = zero_instance(Good)
        while True:
            try:
                dec.decode_nested(good)
            except EndOfInput:
                break
            ...

        # 또는
        for good in dec.iter_models(Good):
            ...
    """

    def __init__(
        self,
        source: Source,
        cfg: Optional[ReaderConfig] = None,
        log_policy: Optional[RawLogPolicy] = None,
    ):
        self.reader = RecordReader(source, cfg)
        self.log_policy = log_policy or RawLogPolicy.from_env()

    def _run(self, fn: Callable[[Sequence[str]], R], target: str) -> R:
        tokens = self.reader.read()
        try:
            result = fn(tokens)
        except DecodeError as e:
            logger.debug(
                "record %d (line %d) rejected: %s; row=%s",
                self.reader.records_read, self.reader.line_num, e,
                safe_row_preview(tokens, self.log_policy),
            )
            raise
        logger.debug(
            "record %d decoded into %s (%d tokens)",
            self.reader.records_read, target, len(tokens),
        )
        return result

    def decode_flat(self, dest: BaseModel) -> None:
        """다음 레코드를 필드당 토큰 하나씩 ``dest`` 에 채운다.

        Raises:
            EndOfInput: 더 읽을 레코드가 없음
        """
        self._run(lambda tokens: decode_flat(tokens, dest), type(dest).__name__)

    def decode_nested(self, dest: BaseModel) -> None:
        """다음 레코드를 중첩/반복 필드까지 ``dest`` 에 채운다.

        Raises:
            EndOfInput: 더 읽을 레코드가 없음
        """
        self._run(lambda tokens: decode_nested(tokens, dest), type(dest).__name__)

    def read_model(self, model: Type[M], nested: bool = True) -> M:
        """다음 레코드로 ``model`` 새 인스턴스를 만든다 (frozen 모델 가능)."""
        return self._run(lambda tokens: decode_model(tokens, model, nested), model.__name__)

    def iter_models(self, model: Type[M], nested: bool = True) -> Iterator[M]:
        """입력이 끝날 때까지 새 인스턴스를 yield. 디코딩 에러는 그대로 전파."""
        while True:
            try:
                item = self.read_model(model, nested=nested)
            except EndOfInput:
                return
            yield item
