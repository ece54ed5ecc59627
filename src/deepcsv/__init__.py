from .errors import (
    DecodeError,
    EndOfInput,
    FieldCountMismatchError,
    FieldNotSettableError,
    InvalidScalarError,
    MissingRepeatCountError,
    RecordLengthMismatchError,
    SchemaError,
    UnsupportedFieldKindError,
)
from .scalars import (
    Float32,
    Float64,
    FloatWidth,
    Int,
    Int8,
    Int16,
    Int32,
    Int64,
    IntWidth,
    ScalarType,
    UInt,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
    coerce,
)
from .schema import Cap, CsvUnmarshaler, FieldKind, column_names, count_tokens, inspect_model
from .decoding import decode_flat, decode_model, decode_nested, zero_instance
from .reader import FieldsPerRecordError, ReaderConfig, RecordReader
from .decoder import Decoder
from .output_parser import CsvOutputParser

__all__ = [
    "CsvOutputParser",
    "Decoder",
    "RecordReader",
    "ReaderConfig",
    "FieldsPerRecordError",
    "decode_flat",
    "decode_nested",
    "decode_model",
    "zero_instance",
    "inspect_model",
    "count_tokens",
    "column_names",
    "coerce",
    "Cap",
    "CsvUnmarshaler",
    "FieldKind",
    "ScalarType",
    "IntWidth",
    "FloatWidth",
    "Int",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "UInt",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
    "Float32",
    "Float64",
    "DecodeError",
    "SchemaError",
    "RecordLengthMismatchError",
    "FieldCountMismatchError",
    "FieldNotSettableError",
    "MissingRepeatCountError",
    "UnsupportedFieldKindError",
    "InvalidScalarError",
    "EndOfInput",
]
