from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from typing import Any
from typing import Callable


def _default_false(*args, **kwargs) -> bool:
    return False


@dataclass(frozen=True)
class CommandDeps:
    # Core/shared
    settings: Any = None
    index: Any = None
    send_chunked: Callable | None = None
    now_ms: Callable[[], int] | None = None

    # History access
    store_factory: Callable | None = None
    retrieve_func: Callable | None = None
    index_history_func: Callable | None = None


@dataclass(frozen=True)
class CommandGates:
    in_allowed_channel: Callable[[Any], bool] = _default_false
    allowed_channel_ids: set[int] = field(default_factory=set)
