"""serde_hub: one schema, many wire formats.

WHY: Configuration and data files come in JSON, YAML, TOML and several
binary encodings. Describing a record once and converting it to and
from every format, without per-format mapping code, removes a whole
class of drift between formats.

HOW: Records and enums are registered with a schema (@serde_record,
@serde_enum, or the explicit register_* forms). The core dispatcher
walks the target type and drives a pluggable backend per wire format.
from_string / from_file / to_string wrap the pipeline in a Result.

RULES:
- Adding a wire format = one new backend module, no core changes
- The public API never raises for data errors; it returns a Result
- Each backend's Node tree stays inside that backend
"""

from serde_hub.backends import BACKENDS, BaseBackend, get_backend
from serde_hub.core.api import from_file, from_string, to_string
from serde_hub.core.classify import is_enum, is_record
from serde_hub.core.errors import (
    DataError,
    FileNotFound,
    LogicError,
    MissingField,
    ParseError,
    SerdeError,
    StructureError,
    UnknownEnumName,
    UnsupportedKeyError,
    VariantNoMatch,
)
from serde_hub.core.result import Result
from serde_hub.core.schema import (
    EnumMember,
    Field,
    enum_schema_of,
    register_enum,
    register_record,
    schema_of,
    serde_enum,
    serde_record,
)

__version__ = "0.1.0"

__all__ = [
    "BACKENDS",
    "BaseBackend",
    "DataError",
    "EnumMember",
    "Field",
    "FileNotFound",
    "LogicError",
    "MissingField",
    "ParseError",
    "Result",
    "SerdeError",
    "StructureError",
    "UnknownEnumName",
    "UnsupportedKeyError",
    "VariantNoMatch",
    "enum_schema_of",
    "from_file",
    "from_string",
    "get_backend",
    "is_enum",
    "is_record",
    "register_enum",
    "register_record",
    "schema_of",
    "serde_enum",
    "serde_record",
    "to_string",
]
