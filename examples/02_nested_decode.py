from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, Field

from deepcsv import Cap, Decoder, DecodeError, Int64, column_names, count_tokens


class GoodDeets(BaseModel):
    featured: str
    related: Annotated[list[Int64], Cap(2)]
    names: list[str] = Field(json_schema_extra={"cap": 3})


class Good(BaseModel):
    id: Int64
    price: float
    stock: Annotated[list[int], Cap(2)]
    deets: GoodDeets


CSV_TEXT = '''"0", "0.0", "10", "1", "false", "1002", "1003", "Boo", "Yeah", "Banjo"
"1", "2.1", "11", "12", "true", "1002", "1005", "Boo", "Nay", "Banjo"
"2", "oops", "11", "12", "true", "1002", "1005", "Boo", "Nay", "Banjo"
'''

print(f"Good consumes {count_tokens(Good)} columns:")
print(", ".join(column_names(Good)))
print()

try:
    for good in Decoder(CSV_TEXT).iter_models(Good):
        print(good.model_dump())
except DecodeError as e:
    print(f"error: {e}")
