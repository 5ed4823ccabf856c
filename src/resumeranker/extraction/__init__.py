"""Document text extraction backends and the strategy selector."""

from __future__ import annotations

from .base import ExtractionBackend, ExtractionResult
from .cloud import CloudExtractionBackend, CloudExtractionConfig
from .local import LocalPdfBackend, LocalPdfConfig
from .selector import ExtractionConfig, ExtractionStrategySelector

__all__ = [
    "CloudExtractionBackend",
    "CloudExtractionConfig",
    "ExtractionBackend",
    "ExtractionConfig",
    "ExtractionResult",
    "ExtractionStrategySelector",
    "LocalPdfBackend",
    "LocalPdfConfig",
]
