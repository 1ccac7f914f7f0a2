"""Error codes and exceptions shared by the SSZ and stable record layers."""
from __future__ import annotations

ERRORS = {
  "E_ENCODING_TOO_LARGE": "Encoded payload length not representable in a 32-bit offset",
  "E_TRUNCATED_INPUT": "Input shorter than the required header or fixed region",
  "E_TRAILING_BYTES": "Unexpected bytes after the fixed region",
  "E_MALFORMED_OFFSETS": "Offsets not non-decreasing or out of bounds",
  "E_INVALID_VALUE": "Value does not satisfy its type",
  "E_INVALID_PRESENCE_BITS": "Presence bits violate the schema",
  "E_CAPACITY_EXCEEDED": "Schema declares more fields than its capacity",
  "E_INVALID_SCHEMA": "Schema definition invalid",
  "E_SCHEMA_MISMATCH": "Value or bytes do not belong to this schema",
  "E_INVALID_INPUT": "Input document invalid",
}


class SSZError(ValueError):
    code = "E_INVALID_VALUE"

    def __init__(self, detail: str | None = None):
        self.detail = detail
        msg = ERRORS[self.code]
        super().__init__(f"{msg}: {detail}" if detail else msg)

    @property
    def message(self) -> str:
        return ERRORS[self.code]

    def to_dict(self) -> dict:
        d = {"code": self.code, "message": self.message}
        if self.detail:
            d["detail"] = self.detail
        return d


class EncodingTooLarge(SSZError):
    code = "E_ENCODING_TOO_LARGE"


class TruncatedInput(SSZError):
    code = "E_TRUNCATED_INPUT"


class TrailingBytes(SSZError):
    code = "E_TRAILING_BYTES"


class MalformedOffsets(SSZError):
    code = "E_MALFORMED_OFFSETS"


class InvalidValue(SSZError):
    code = "E_INVALID_VALUE"


class InvalidPresenceBits(SSZError):
    code = "E_INVALID_PRESENCE_BITS"


class CapacityExceeded(SSZError):
    code = "E_CAPACITY_EXCEEDED"


class InvalidSchema(SSZError):
    code = "E_INVALID_SCHEMA"


class SchemaMismatch(SSZError):
    code = "E_SCHEMA_MISMATCH"


class InvalidInput(SSZError):
    code = "E_INVALID_INPUT"
