# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the terms described in the LICENSE file in
# the root directory of this source tree.

from typing import Any

SENSITIVE_PATTERNS = ["api_key", "apikey", "auth", "password", "secret", "security", "token"]

# Configuration keys that contain a sensitive pattern but never hold a secret
SAFE_FIELDS = ["authenticator", "token_url"]


def redact_sensitive_fields(data: dict[str, Any]) -> dict[str, Any]:
    """Redact secrets from configuration or client context before logging it."""

    def _redact_value(v: Any) -> Any:
        if isinstance(v, dict):
            return _redact_dict(v)
        elif isinstance(v, list):
            return [_redact_value(i) for i in v]
        return v

    def _redact_dict(d: dict[str, Any]) -> dict[str, Any]:
        result = {}
        for k, v in d.items():
            key = str(k).lower()
            if key in SAFE_FIELDS:
                result[k] = _redact_value(v)
            elif any(pattern in key for pattern in SENSITIVE_PATTERNS):
                result[k] = "********"
            else:
                result[k] = _redact_value(v)
        return result

    return _redact_dict(data)
