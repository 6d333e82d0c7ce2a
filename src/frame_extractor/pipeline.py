"""Extraction pipeline — decode, extract, then screen what came out.

Usage:

    pipeline = ExtractionPipeline.create(
        config=SearchConfig.from_delimiter(lookup_delimiter("STX/ETX")),
        methods=["hybridMode"],
        banned=["spam"],
    )

    result = pipeline.extract_encoded("02 48 49 03", "hex")
    verdicts = pipeline.screen(result)      # sequence → FilterResult
    shown = pipeline.visible(result)        # sequences not hidden
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable

from .codec import decode
from .extractor import DEFAULT_METHODS, Extractor, MethodSpec
from .filter_engine import DEFAULT_THRESHOLD, FilterEngine
from .types import AggregatedExtractionResult, ExtractionMethod, FilterResult, SearchConfig


@dataclass
class ExtractionPipeline:
    """Extractor + FilterEngine with the settings of one deployment."""

    extractor: Extractor
    filter_engine: FilterEngine
    config: SearchConfig = field(default_factory=SearchConfig)
    methods: tuple[ExtractionMethod, ...] = DEFAULT_METHODS
    ban_enabled: bool = True
    repetition_enabled: bool = True
    threshold: float = DEFAULT_THRESHOLD

    @classmethod
    def create(
        cls,
        *,
        config: SearchConfig | None = None,
        methods: Iterable[MethodSpec] | None = None,
        banned: list[str] | None = None,
        max_workers: int | None = None,
        **filter_settings,
    ) -> "ExtractionPipeline":
        """Factory — creates a pipeline with its own filter engine."""
        return cls(
            extractor=Extractor(max_workers=max_workers),
            filter_engine=FilterEngine(banned),
            config=config or SearchConfig(),
            methods=tuple(ExtractionMethod(m) for m in methods) if methods is not None else DEFAULT_METHODS,
            **filter_settings,
        )

    def extract(self, data: bytes) -> AggregatedExtractionResult:
        return self.extractor.run(data, self.config, self.methods)

    def extract_encoded(self, text: str, encoding: str = "hex") -> AggregatedExtractionResult:
        """Decode hex/base64 input, then extract.  Raises DecodeError."""
        return self.extract(decode(text, encoding))

    def check(self, text: str) -> FilterResult:
        """Filter verdict for one piece of text with the pipeline's settings."""
        return self.filter_engine.filter(
            text,
            ban_enabled=self.ban_enabled,
            repetition_enabled=self.repetition_enabled,
            threshold=self.threshold,
        )

    def screen(self, result: AggregatedExtractionResult) -> dict[str, FilterResult]:
        """Verdict for every unique sequence, keyed in sorted order."""
        return {seq: self.check(seq) for seq in sorted(result.unique_sequences)}

    def visible(self, result: AggregatedExtractionResult) -> list[str]:
        """Unique sequences that should not be hidden."""
        return [seq for seq, verdict in self.screen(result).items() if not verdict.should_hide]
