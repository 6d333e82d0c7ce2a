"""Extractor — the main API.  Fans a buffer out to several methods, merges.

Usage:
    from frame_extractor import Extractor, SearchConfig, ExtractionMethod, lookup_delimiter

    config = SearchConfig.from_delimiter(lookup_delimiter("SOH/ETX"))
    extractor = Extractor()          # reusable, thread-safe

    result = extractor.run(b"\\x01HELLO\\x03", config, {ExtractionMethod.HYBRID_MODE})
    print(sorted(result.unique_sequences))    # ['HELLO', ...]
"""

from __future__ import annotations
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Iterable

from .methods import EXTRACTORS
from .types import AggregatedExtractionResult, ExtractionMethod, ExtractionResult, SearchConfig

logger = logging.getLogger(__name__)

MethodSpec = ExtractionMethod | str

DEFAULT_METHODS: tuple[ExtractionMethod, ...] = (ExtractionMethod.SIGNALING_FLEXIBLE,)


def resolve_methods(methods: Iterable[MethodSpec] | None) -> list[ExtractionMethod]:
    """Normalize a method selection into concrete methods, in declaration order.

    Strings are accepted by wire name ("signalingStrict").  ``HYBRID_MODE``
    expands to every concrete method.  ``None`` means the default
    (signalingFlexible).  Raises ValueError for unknown names.
    """
    if methods is None:
        return list(DEFAULT_METHODS)
    selected: set[ExtractionMethod] = set()
    for m in methods:
        method = ExtractionMethod(m)
        if method is ExtractionMethod.HYBRID_MODE:
            selected.update(ExtractionMethod.concrete())
        else:
            selected.add(method)
    return sorted(selected, key=lambda m: m.rank)


def extract_one(method: MethodSpec, data: bytes, config: SearchConfig) -> ExtractionResult:
    """Run a single concrete method."""
    method = ExtractionMethod(method)
    if method is ExtractionMethod.HYBRID_MODE:
        raise ValueError("hybridMode has no extractor of its own; use extract_all")
    return EXTRACTORS[method](data, config)


class Extractor:
    """Runs the selected methods concurrently over one buffer.

    Every task reads the same immutable bytes and frozen config and returns
    its own ExtractionResult; nothing is shared or accumulated across
    threads.  Results are collected in completion order.
    """

    def __init__(self, max_workers: int | None = None) -> None:
        self.max_workers = max_workers

    def run(
        self,
        data: bytes,
        config: SearchConfig,
        methods: Iterable[MethodSpec] | None = None,
    ) -> AggregatedExtractionResult:
        """Extract with every selected method and merge into one result."""
        selected = resolve_methods(methods)
        buf = bytes(data)
        if not selected:
            return AggregatedExtractionResult.from_results([])

        workers = self.max_workers or len(selected)
        results: list[ExtractionResult] = []
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="extract") as pool:
            futures = {
                pool.submit(EXTRACTORS[m], buf, config): m for m in selected
            }
            for future in as_completed(futures):
                method = futures[future]
                try:
                    result = future.result()
                except Exception:
                    # One failed method never aborts the others
                    logger.exception("extractor %s failed; dropping its result", method.value)
                    continue
                logger.debug(
                    "%s: %d sequences in %.3f ms", method.value, result.count, result.duration_ms
                )
                results.append(result)

        return AggregatedExtractionResult.from_results(results)


_default = Extractor()


def extract_all(
    data: bytes,
    config: SearchConfig,
    methods: Iterable[MethodSpec] | None = None,
) -> AggregatedExtractionResult:
    """Module-level shortcut for ``Extractor().run``."""
    return _default.run(data, config, methods)
