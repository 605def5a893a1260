"""Brute-force search for Safe salt nonces with a vanity address prefix."""

import logging
import multiprocessing
import os
import queue
import random
import string
from typing import TYPE_CHECKING, Any, Optional, Sequence

from .constants import MAX_PREFIX_NIBBLES, NONCE_LENGTH
from .deployment import Safe
from .models import Configuration

if TYPE_CHECKING:
    from multiprocessing.queues import Queue
    from threading import Event

logger = logging.getLogger(__name__)

# Search iterations between checks of the stop event.
STOP_CHECK_INTERVAL = 1024
# Seconds between liveness checks while waiting for a worker result.
RESULT_POLL_INTERVAL = 1.0


class Prefix:
    """A hex-digit (nibble) prefix to match addresses against.

    Odd-length prefixes compare the high nibble of the last partial byte, so
    `0xdeadb` matches any address starting with `de ad b?`.
    """

    __slots__ = ("nibbles", "_head", "_tail")

    def __init__(self, nibbles: Sequence[int]) -> None:
        nibbles = tuple(nibbles)
        if len(nibbles) > MAX_PREFIX_NIBBLES:
            raise ValueError(
                f"Prefix too long: {len(nibbles)} hex digits, at most {MAX_PREFIX_NIBBLES}."
            )
        if any(not 0 <= nibble <= 0xF for nibble in nibbles):
            raise ValueError("Prefix nibbles must be between 0x0 and 0xf.")
        self.nibbles = nibbles
        full = len(nibbles) // 2
        self._head = bytes(
            (nibbles[2 * i] << 4) | nibbles[2 * i + 1] for i in range(full)
        )
        self._tail = nibbles[-1] if len(nibbles) % 2 else None

    @classmethod
    def from_hex(cls, text: str) -> "Prefix":
        digits = text[2:] if text.startswith(("0x", "0X")) else text
        invalid = [char for char in digits if char not in string.hexdigits]
        if invalid:
            raise ValueError(f"Invalid hex digit '{invalid[0]}' in prefix '{text}'.")
        return cls(int(char, 16) for char in digits)

    @classmethod
    def from_bytes(cls, data: bytes) -> "Prefix":
        nibbles: list[int] = []
        for byte in data:
            nibbles.extend((byte >> 4, byte & 0xF))
        return cls(nibbles)

    def matches(self, data: bytes) -> bool:
        if not data.startswith(self._head):
            return False
        return self._tail is None or data[len(self._head)] >> 4 == self._tail

    def expected_attempts(self) -> int:
        return 16 ** len(self.nibbles)

    def __len__(self) -> int:
        return len(self.nibbles)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Prefix):
            return NotImplemented
        return self.nibbles == other.nibbles

    def __hash__(self) -> int:
        return hash(self.nibbles)

    def __str__(self) -> str:
        return "0x" + "".join(f"{nibble:x}" for nibble in self.nibbles)

    def __repr__(self) -> str:
        return f"Prefix({self})"

    def __reduce__(self):
        return (Prefix, (self.nibbles,))


def new_rng() -> random.Random:
    """Return a private, non-deterministically seeded random source."""
    return random.Random(os.urandom(32))


def search_once(safe: Safe, prefix: Prefix, rng: random.Random) -> bool:
    def randomize(nonce: memoryview) -> None:
        nonce[:] = rng.randbytes(NONCE_LENGTH)

    safe.update_salt_nonce(randomize)
    return prefix.matches(bytes(safe.creation_address()))


def search(
    safe: Safe,
    prefix: Prefix,
    rng: Optional[random.Random] = None,
    stop: Optional["Event"] = None,
) -> bool:
    """Randomize the salt nonce of `safe` until its address matches `prefix`.

    Runs until a match is found, or until `stop` is set. Returns whether a
    match was found.
    """
    if rng is None:
        rng = new_rng()
    attempts = 1
    while not search_once(safe, prefix, rng):
        attempts += 1
        if stop is not None and attempts % STOP_CHECK_INTERVAL == 0 and stop.is_set():
            logger.debug(f"Search stopped after {attempts} attempts")
            return False
    logger.debug(f"Found {safe.creation_address()} after {attempts} attempts")
    return True


def _search_worker(
    configuration: Configuration, prefix: Prefix, results: "Queue[bytes]"
) -> None:
    safe = Safe(configuration)
    search(safe, prefix)
    results.put(safe.salt_nonce())


def default_workers() -> int:
    return os.cpu_count() or 1


def parallel_search(
    configuration: Configuration,
    prefix: Prefix,
    workers: Optional[int] = None,
) -> Safe:
    """Search with `workers` independent processes and return the first match.

    Every worker owns its own Safe and random source; the only shared object
    is the result queue. Workers still running once a result arrives are
    terminated. With a single worker the search runs in the calling process.
    """
    if workers is None:
        workers = default_workers()
    if workers < 1:
        raise ValueError(f"Invalid number of workers: {workers}.")

    if workers == 1:
        safe = Safe(configuration)
        search(safe, prefix)
        return safe

    results: "Queue[bytes]" = multiprocessing.Queue()
    processes = [
        multiprocessing.Process(
            target=_search_worker,
            args=(configuration, prefix, results),
            name=f"safe-vanity-{i}",
            daemon=True,
        )
        for i in range(workers)
    ]
    logger.info(f"Starting {workers} search workers for prefix {prefix}")
    for process in processes:
        process.start()
    try:
        salt_nonce = _wait_for_result(results, processes)
    finally:
        for process in processes:
            process.terminate()
        for process in processes:
            process.join()

    safe = Safe(configuration)
    safe.set_salt_nonce(salt_nonce)
    logger.info(f"Found {safe.creation_address()} with salt nonce 0x{salt_nonce.hex()}")
    return safe


def _wait_for_result(
    results: "Queue[bytes]", processes: list[multiprocessing.Process]
) -> bytes:
    while True:
        try:
            return results.get(timeout=RESULT_POLL_INTERVAL)
        except queue.Empty:
            if any(process.is_alive() for process in processes):
                continue
        # A worker may have exited right after posting its result.
        try:
            return results.get(timeout=RESULT_POLL_INTERVAL)
        except queue.Empty:
            raise RuntimeError("All search workers exited without a result.")
