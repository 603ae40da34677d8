"""Inline vocabulary annotation engine.

Scans a document for words selected by a vocabulary provider, fetches a
translation for each and splices annotation fragments back into the text.
"""

from .cache import TTLCache
from .document import InMemoryDocument
from .engine import Engine, build_engine
from .scanner import AnnotationScanner, ScanResult, ScanStatus

__all__ = [
    "AnnotationScanner",
    "Engine",
    "InMemoryDocument",
    "ScanResult",
    "ScanStatus",
    "TTLCache",
    "build_engine",
]
