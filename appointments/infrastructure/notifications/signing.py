from __future__ import annotations

import hmac

SIGNATURE_HEADER = "X-Signature-256"


def sign_body(body: bytes, secret: str) -> str:
    """`sha256=<hex>` HMAC of the raw request body, sent in SIGNATURE_HEADER."""
    digest = hmac.new(secret.encode("utf-8"), body, "sha256").hexdigest()
    return f"sha256={digest}"
