"""Photoingest - Import photos from a card or folder into one or more libraries."""

from photoingest.exceptions import (
    ConfigurationError,
    ConversionError,
    CopyError,
    DngConverterError,
    ExifToolError,
    ExternalToolError,
    HistoryError,
    PhotoIngestError,
    PipelineError,
    PreconditionError,
    PreviewExtractionError,
    TrashError,
    VerificationError,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Base exception
    "PhotoIngestError",
    # Configuration
    "ConfigurationError",
    "PreconditionError",
    # State
    "HistoryError",
    # Pipeline stages
    "PipelineError",
    "CopyError",
    "VerificationError",
    "ConversionError",
    "PreviewExtractionError",
    "TrashError",
    # External tools
    "ExternalToolError",
    "ExifToolError",
    "DngConverterError",
]
