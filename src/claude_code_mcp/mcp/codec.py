"""Base64 helpers for embedding arbitrary text in single-line prompts."""

import base64


def encode_text(text: str) -> str:
    """Encode text as UTF-8 then base64."""
    return base64.b64encode(text.encode("utf-8", "surrogatepass")).decode("ascii")


def decode_text(encoded: str) -> str:
    """Reverse of encode_text."""
    return base64.b64decode(encoded.encode("ascii")).decode("utf-8", "surrogatepass")
