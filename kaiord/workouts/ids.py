"""Repetition block id generation."""

from __future__ import annotations

import time
import uuid
from typing import Protocol


class IdGenerator(Protocol):
    def next(self) -> str: ...


class TimestampIdGenerator:
    """Generates ``block-<epoch ms>-<random>`` ids."""

    def next(self) -> str:
        return f"block-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"


class SequentialIdGenerator:
    """Deterministic ids (``block-1``, ``block-2``, ...) for tests and fixtures."""

    def __init__(self, prefix: str = "block", start: int = 1) -> None:
        self.prefix = prefix
        self._counter = start

    def next(self) -> str:
        block_id = f"{self.prefix}-{self._counter}"
        self._counter += 1
        return block_id


default_id_generator = TimestampIdGenerator()
