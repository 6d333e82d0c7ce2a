"""Frame Extractor — pull delimiter-framed messages out of raw byte streams."""

from .codec import decode
from .config import create_pipeline, load_config, load_from_yaml
from .delimiters import STANDARD_DELIMITERS, lookup_delimiter
from .extractor import Extractor, extract_all, extract_one
from .filter_engine import FilterEngine
from .pipeline import ExtractionPipeline
from .types import (
    AggregatedExtractionResult, DecodeError, DelimiterPair, ExtractionError,
    ExtractionMethod, ExtractionResult, FilterResult, InvalidCustomDelimiter,
    SearchConfig, UnknownDelimiter,
)

__all__ = [
    "decode",
    "Extractor", "extract_all", "extract_one",
    "FilterEngine",
    "ExtractionPipeline",
    "create_pipeline", "load_config", "load_from_yaml",
    "STANDARD_DELIMITERS", "lookup_delimiter",
    "SearchConfig", "DelimiterPair", "ExtractionMethod",
    "ExtractionResult", "AggregatedExtractionResult", "FilterResult",
    "ExtractionError", "DecodeError", "UnknownDelimiter", "InvalidCustomDelimiter",
]
__version__ = "0.1.0"
