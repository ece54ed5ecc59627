from __future__ import annotations

import io

from pydantic import BaseModel

from deepcsv import Decoder, EndOfInput, Float32, zero_instance


class T(BaseModel):
    f1: int
    f2: int
    f3: Float32
    f4: str


CSV_TEXT = '''1, 2, 3, "test"
4, 5, 6, "another_test"
'''

dec = Decoder(io.StringIO(CSV_TEXT))
t = zero_instance(T)
while True:
    try:
        dec.decode_flat(t)
    except EndOfInput:
        break
    print(t)
