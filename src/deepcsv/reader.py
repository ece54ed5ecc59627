# -*- coding: utf-8 -*-
from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, TextIO, Union

from .errors import EndOfInput

Source = Union[str, TextIO, Iterable[str]]


class FieldsPerRecordError(csv.Error):
    """레코드 필드 수가 ``fields_per_record`` 설정과 다름."""

    def __init__(self, line: int, expected: int, actual: int):
        self.line = line
        self.expected = expected
        self.actual = actual
        super().__init__(f"record on line {line}: wrong number of fields: expect {expected}, get {actual}")


@dataclass(frozen=True)
class ReaderConfig:
    delimiter: str = ","
    quotechar: str = '"'
    trim_leading_space: bool = True
    comment: Optional[str] = None  # 이 문자로 시작하는 줄은 건너뜀
    fields_per_record: int = -1  # 0: 첫 레코드 기준, >0: 고정, <0: 검사 안 함
    lazy_quotes: bool = False


DEFAULT_READER_CONFIG = ReaderConfig()


class RecordReader:
    """``csv.reader`` 래퍼. ``read()`` 한 번에 레코드 하나(문자열 리스트).

    빈 줄은 건너뛰고, 입력이 끝나면 ``EndOfInput`` 을 던진다. 따옴표 오류 등
    ``csv.Error`` 는 그대로 전파한다.
    """

    def __init__(self, source: Source, cfg: Optional[ReaderConfig] = None):
        self.cfg = cfg or DEFAULT_READER_CONFIG
        if isinstance(source, str):
            source = io.StringIO(source)
        self._lines_seen = 0
        self._reader = csv.reader(
            self._raw_lines(source),
            delimiter=self.cfg.delimiter,
            quotechar=self.cfg.quotechar,
            skipinitialspace=self.cfg.trim_leading_space,
            strict=not self.cfg.lazy_quotes,
        )
        self._expected = self.cfg.fields_per_record
        self.records_read = 0

    def _raw_lines(self, lines: Iterable[str]) -> Iterator[str]:
        # 주석은 파싱 전 원문 줄 기준으로 거른다. 따옴표로 감싼 필드는 주석이 아님.
        comment = self.cfg.comment
        in_quotes = False
        for line in lines:
            self._lines_seen += 1
            if comment and not in_quotes and line.startswith(comment):
                continue
            if line.count(self.cfg.quotechar) % 2:
                in_quotes = not in_quotes
            yield line

    @property
    def line_num(self) -> int:
        """마지막으로 읽은 원문 줄 번호 (주석 줄 포함)."""
        return self._lines_seen

    def read(self) -> List[str]:
        for row in self._reader:
            if not row:
                continue
            if self._expected == 0:
                self._expected = len(row)
            elif self._expected > 0 and len(row) != self._expected:
                raise FieldsPerRecordError(self.line_num, self._expected, len(row))
            self.records_read += 1
            return row
        raise EndOfInput()

    def __iter__(self):
        while True:
            try:
                yield self.read()
            except EndOfInput:
                return
