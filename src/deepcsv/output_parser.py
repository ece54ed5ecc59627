# -*- coding: utf-8 -*-
from __future__ import annotations

import csv
import re
from typing import List, Optional, Type

from langchain_core.exceptions import OutputParserException
from langchain_core.output_parsers import BaseOutputParser
from pydantic import BaseModel, Field, ValidationError

from .decoding import decode_model
from .errors import DecodeError, EndOfInput
from .prompting import build_csv_format_prompt
from .reader import DEFAULT_READER_CONFIG, ReaderConfig, RecordReader

_CODE_FENCE_RE = re.compile(r"```(?:csv)?\s*(.*?)\s*```", flags=re.DOTALL)


class CsvOutputParser(BaseOutputParser[BaseModel]):
    """LangChain용 CSV 한 줄 출력 파서 (중첩/반복 필드 지원)."""

    pydantic_model: Type[BaseModel] = Field(default=None)
    cfg: ReaderConfig = Field(default_factory=lambda: DEFAULT_READER_CONFIG)

    def __init__(self, model: Type[BaseModel], cfg: Optional[ReaderConfig] = None, **kwargs):
        super().__init__(**kwargs)
        object.__setattr__(self, 'pydantic_model', model)
        object.__setattr__(self, 'cfg', cfg or DEFAULT_READER_CONFIG)

    def get_format_instructions(self) -> str:
        return build_csv_format_prompt(self.pydantic_model, self.cfg)

    def decode(self, text: str) -> List[str]:
        """LLM 출력에서 첫 CSV 레코드의 토큰 리스트만 추출 (모델 검증 없이).

        ```csv ... ``` 코드펜스가 있으면 그 안쪽만 읽는다.
        """
        s = (text or "").strip()
        m = _CODE_FENCE_RE.search(s)
        if m:
            s = m.group(1).strip()
        return RecordReader(s, self.cfg).read()

    def parse(self, text: str) -> BaseModel:
        try:
            tokens = self.decode(text)
            record = decode_model(tokens, self.pydantic_model)
            # model_construct 로 만든 인스턴스라 Field 제약은 여기서 검증
            return self.pydantic_model.model_validate(record.model_dump(by_alias=True))
        except EndOfInput as e:
            raise OutputParserException("Empty input. Model produced no CSV row.") from e
        except (DecodeError, csv.Error, ValidationError) as e:
            raise OutputParserException(str(e)) from e

    @property
    def _type(self) -> str:
        return "csv"
