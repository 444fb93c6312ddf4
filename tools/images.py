"""Helpers for images passed around as data URLs."""

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass

_DATA_URL = re.compile(r"^data:(image/\w+);base64,(.+)$", re.DOTALL)
_ANY_IMAGE_PREFIX = re.compile(r"^data:image/(png|jpeg|jpg|webp);base64,")


@dataclass(frozen=True)
class InlineImage:
    mime_type: str
    data: bytes

    def as_part(self) -> dict:
        """Blob dict accepted by ``GenerativeModel.generate_content``."""

        return {"mime_type": self.mime_type, "data": self.data}

    def to_data_url(self) -> str:
        return f"data:{self.mime_type};base64,{base64.b64encode(self.data).decode('ascii')}"


def split_data_url(data_url: str) -> InlineImage:
    """Decode a data URL; bare base64 is assumed to be JPEG.

    Raises ``ValueError`` when the payload is not valid base64.
    """

    match = _DATA_URL.match(data_url.strip())
    if match:
        mime_type, encoded = match.group(1), match.group(2)
    else:
        mime_type, encoded = "image/jpeg", _ANY_IMAGE_PREFIX.sub("", data_url.strip())
    encoded = "".join(encoded.split())
    try:
        return InlineImage(mime_type=mime_type, data=base64.b64decode(encoded, validate=True))
    except binascii.Error as exc:
        raise ValueError("Image is not valid base64") from exc


__all__ = ["InlineImage", "split_data_url"]
