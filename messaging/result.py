from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union


class FailureKind(str, Enum):
    UNAVAILABLE = "unavailable"
    CONFIGURATION = "configuration"
    INVALID_ARGUMENT = "invalid_argument"
    PROVIDER_ERROR = "provider_error"


@dataclass(frozen=True)
class Success:
    provider_response: Any
    ok: bool = True


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    message: str
    ok: bool = False


DispatchResult = Union[Success, Failure]
