from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable


@dataclass(frozen=True)
class RuntimeDeps:
    # core
    settings: Any
    index: Any
    send_chunked: Callable
    now_ms: Callable[[], int]

    # history access
    store_factory: Callable[[Any], Any]
    retrieve_func: Callable
    log_message_func: Callable

    # llm
    client: Any
    openai_model: str
    default_prompt: str
    ai_channel_name: str


@dataclass(frozen=True)
class RuntimeBootDeps:
    allowed_channel_ids: set[int]
