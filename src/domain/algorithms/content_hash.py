from __future__ import annotations

import base64
import hashlib


def content_fingerprint(raw: bytes) -> str:
    """SHA-1 hex digest of the raw feed bytes, used for change detection."""

    return hashlib.sha1(raw).hexdigest()


def entity_tag(raw: bytes) -> str:
    """Strong HTTP entity tag for the raw feed bytes.

    Same shape as the tags produced by the Node `etag` package:
    `"<length in hex>-<first 27 chars of base64 sha1>"`.
    """

    digest = base64.b64encode(hashlib.sha1(raw).digest()).decode("ascii")[:27]
    return f'"{len(raw):x}-{digest}"'
