from __future__ import annotations

from cauldron.core.parser import ParserOptions
from cauldron.processor import Processor


_PROCESSOR: Processor | None = None


def init_processor(*, options: ParserOptions | None = None) -> Processor:
    """Create the process-wide Processor once and cache it.

    Safe to call multiple times; subsequent calls return the already created instance.
    """

    global _PROCESSOR
    if _PROCESSOR is None:
        _PROCESSOR = Processor(options=options)
    return _PROCESSOR


def reset_processor_for_tests() -> None:
    """Drop the cached Processor (and with it every tracked game)."""

    global _PROCESSOR
    _PROCESSOR = None


def get_processor() -> Processor:
    if _PROCESSOR is None:
        raise RuntimeError("Processor not initialized. Call init_processor() at startup.")
    return _PROCESSOR
