"""
Token codec: charset conversion plus base64 transport encoding.

Every token travels as base64 of its bytes in the wire encoding, so a
transport token never contains a space or a newline.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

from __future__ import annotations

import base64
import binascii
from typing import Union

from ..config import normalize_encoding
from ..constants import DEFAULT_LOCAL_ENCODING, DEFAULT_WIRE_ENCODING
from ..exceptions import ConfigurationError, ProtocolError, ValidationError

TokenText = Union[str, bytes]


class TokenCodec:
    """Converts tokens between local text and wire transport tokens."""

    def __init__(
        self,
        wire_encoding: str = DEFAULT_WIRE_ENCODING,
        local_encoding: str = DEFAULT_LOCAL_ENCODING,
    ):
        """Initialize codec.

        Args:
            wire_encoding: Charset of token bytes on the wire
            local_encoding: Charset of application text

        Raises:
            ConfigurationError: If either encoding is unsupported
        """
        try:
            self.wire_encoding = normalize_encoding(wire_encoding)
            self.local_encoding = normalize_encoding(local_encoding)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

    def __repr__(self) -> str:
        return (
            f"TokenCodec(wire_encoding={self.wire_encoding!r}, "
            f"local_encoding={self.local_encoding!r})"
        )

    def encode_token(self, text: TokenText) -> str:
        """Encode one token for the wire.

        Args:
            text: Token as str, or as bytes already in the local encoding

        Returns:
            Base64 transport token (ASCII only)

        Raises:
            ValidationError: If the text cannot be represented in the local
                or the wire encoding
        """
        if isinstance(text, bytes):
            try:
                text = text.decode(self.local_encoding)
            except UnicodeDecodeError as e:
                raise ValidationError(
                    f"Token bytes are not valid {self.local_encoding}: {e}"
                ) from e
        elif isinstance(text, str):
            try:
                text.encode(self.local_encoding)
            except UnicodeEncodeError as e:
                raise ValidationError(
                    f"Token is not representable in {self.local_encoding}: {e}"
                ) from e
        else:
            raise ValidationError(
                f"Token must be str or bytes, got {type(text).__name__}"
            )

        try:
            raw = text.encode(self.wire_encoding)
        except UnicodeEncodeError as e:
            raise ValidationError(
                f"Token is not representable in {self.wire_encoding}: {e}"
            ) from e
        return base64.b64encode(raw).decode("ascii")

    def decode_token(self, token: TokenText) -> str:
        """Decode one transport token received from the wire.

        Args:
            token: Base64 transport token

        Returns:
            Token text in the local encoding

        Raises:
            ProtocolError: If the token is not valid base64 or its bytes are
                not valid in the wire or local encoding
        """
        try:
            raw = base64.b64decode(token, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ProtocolError(f"Invalid base64 token {token!r}: {e}") from e

        try:
            text = raw.decode(self.wire_encoding)
        except UnicodeDecodeError as e:
            raise ProtocolError(
                f"Reply token is not valid {self.wire_encoding}: {e}"
            ) from e

        try:
            text.encode(self.local_encoding)
        except UnicodeEncodeError as e:
            raise ProtocolError(
                f"Reply token is not representable in {self.local_encoding}: {e}"
            ) from e
        return text
