import base64
import binascii
from dataclasses import dataclass

from ..errors import InvalidDataUri


@dataclass(frozen=True)
class DataUri:
    """A decoded ``data:<mime>;base64,<payload>`` value."""

    mime_type: str
    data: bytes

    def to_string(self) -> str:
        return encode_data_uri(self.data, self.mime_type)


def encode_data_uri(data: bytes, mime_type: str) -> str:
    b64 = base64.b64encode(data).decode("utf-8")
    return f"data:{mime_type};base64,{b64}"


def b64_to_data_uri(b64: str, mime_type: str = "image/png") -> str:
    return f"data:{mime_type};base64,{b64}"


def parse_data_uri(value: str) -> DataUri:
    """Split a base64 data URI into its MIME type and raw bytes."""
    if not isinstance(value, str) or not value.startswith("data:"):
        raise InvalidDataUri("Expected a data URI of the form 'data:<mimetype>;base64,<encoded_data>'.")

    header, sep, payload = value[len("data:"):].partition(",")
    if not sep:
        raise InvalidDataUri("Data URI has no payload.")

    params = header.split(";")
    if "base64" not in params[1:]:
        raise InvalidDataUri("Only base64-encoded data URIs are supported.")

    mime_type = params[0].strip().lower()
    if not mime_type:
        raise InvalidDataUri("Data URI is missing a MIME type.")

    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidDataUri("Data URI payload is not valid base64.") from exc

    return DataUri(mime_type=mime_type, data=data)
