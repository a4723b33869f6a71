"""Snowflake-style IDs for products and bids.

IDs are decimal strings of a 63-bit integer, so they sort by creation time
and double as pagination cursors. Single-process generator: the machine_id
must differ per worker when several API processes share one database.
"""

import re
import threading
import time

_ID_PATTERN = re.compile(r"^[1-9][0-9]{0,18}$")


class SnowflakeIdGenerator:
    """Layout (63 bits): 41-bit ms timestamp | 10-bit machine_id | 12-bit sequence."""

    _EPOCH_MS = 1_735_689_600_000  # 2025-01-01T00:00:00Z
    _MACHINE_BITS = 10
    _SEQUENCE_BITS = 12
    _MAX_SEQUENCE = (1 << _SEQUENCE_BITS) - 1

    def __init__(self, machine_id: int = 0) -> None:
        if not (0 <= machine_id < (1 << self._MACHINE_BITS)):
            raise ValueError(f"machine_id must be 0-{(1 << self._MACHINE_BITS) - 1}")
        self._machine_id = machine_id
        self._sequence = 0
        self._last_ms = -1
        self._lock = threading.Lock()

    def next_id(self) -> str:
        with self._lock:
            now_ms = self._now_ms()
            if now_ms == self._last_ms:
                self._sequence = (self._sequence + 1) & self._MAX_SEQUENCE
                if self._sequence == 0:
                    while now_ms <= self._last_ms:
                        now_ms = self._now_ms()
            else:
                self._sequence = 0

            self._last_ms = now_ms
            value = (
                ((now_ms - self._EPOCH_MS) << (self._MACHINE_BITS + self._SEQUENCE_BITS))
                | (self._machine_id << self._SEQUENCE_BITS)
                | self._sequence
            )
            return str(value)

    @staticmethod
    def _now_ms() -> int:
        return int(time.time() * 1000)


_default_generator = SnowflakeIdGenerator()


def generate_id() -> str:
    return _default_generator.next_id()


def is_valid_id(value: str) -> bool:
    """True when value looks like an ID this generator could have produced."""
    return bool(_ID_PATTERN.match(value)) and int(value) < (1 << 63)
