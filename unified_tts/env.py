from __future__ import annotations

import os
from typing import Optional

from .errors import MissingEnvironmentVariableError

__all__ = ["get_env"]


def get_env(
    key: str,
    default: Optional[str] = None,
    *,
    error_message: Optional[str] = None,
) -> str:
    """
    Read ``key`` from the environment, falling back to ``default``.

    Empty values count as missing. Raises ``MissingEnvironmentVariableError``
    when neither the variable nor a default is available.
    """
    value = os.environ.get(key) or default
    if not value:
        raise MissingEnvironmentVariableError(
            error_message or f"Environment variable {key} not found"
        )
    return value

