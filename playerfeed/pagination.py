"""
Opaque pagination cursors.

A cursor wraps the store's last evaluated key as URL-safe base64 JSON.
Callers must hand it back verbatim; its contents are not part of the API.
"""

from __future__ import annotations

import base64
import binascii
import json
from typing import Optional

from playerfeed.errors import BadRequestError


def encode_cursor(last_evaluated_key: Optional[dict]) -> Optional[str]:
    if not last_evaluated_key:
        return None
    raw = json.dumps(last_evaluated_key, separators=(",", ":"), sort_keys=True)
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii")


def decode_cursor(cursor: Optional[str]) -> Optional[dict]:
    if not cursor:
        return None
    try:
        decoded = json.loads(base64.urlsafe_b64decode(cursor.encode("ascii")))
    except (binascii.Error, UnicodeError, ValueError) as exc:
        raise BadRequestError("Invalid pagination cursor") from exc
    if not isinstance(decoded, dict):
        raise BadRequestError("Invalid pagination cursor")
    return decoded
