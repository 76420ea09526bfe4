from __future__ import annotations


class SastError(Exception):
    """Base error for the SAST scan client."""


class ValidationError(SastError):
    """Raised when user input or configuration is invalid."""


class NoInputError(SastError):
    """Raised when no SAST result files are found under the search root."""


class FileReadError(SastError):
    """Raised when a discovered file cannot be opened for upload."""


class ExternalServiceError(SastError):
    """Raised when the SOOS API fails or returns an unusable response."""
