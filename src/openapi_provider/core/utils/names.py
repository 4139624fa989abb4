# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the terms described in the LICENSE file in
# the root directory of this source tree.

import re

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_NON_WORD = re.compile(r"[^a-zA-Z0-9]+")


def to_compliant_name(name: str) -> str:
    """Convert a declared name into the lower snake_case form the host tool accepts.

    >>> to_compliant_name("apiKeyAuth")
    'api_key_auth'
    >>> to_compliant_name("X-Request-ID")
    'x_request_id'
    """
    words = _CAMEL_BOUNDARY.sub("_", name)
    words = _NON_WORD.sub("_", words)
    return words.strip("_").lower()
