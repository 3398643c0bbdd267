"""Extraction of self-contained C benchmarks from mined repositories."""

from benchmine.config import ExtractorConfig
from benchmine.errors import ExtractionError, ExtractionTimeout
from benchmine.extract import extract_code, extract_root
from benchmine.workspace import Workspace

__version__ = "0.1.0"

__all__ = [
    "ExtractionError",
    "ExtractionTimeout",
    "ExtractorConfig",
    "Workspace",
    "extract_code",
    "extract_root",
]
