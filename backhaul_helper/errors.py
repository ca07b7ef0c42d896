from __future__ import annotations


class SetupError(RuntimeError):
    """Base for every condition that ends a run with a non-zero status."""


class UnsupportedArchitecture(SetupError):
    pass


class DownloadError(SetupError):
    pass


class ExtractionError(SetupError):
    pass


class InvalidSelection(SetupError):
    pass


class InputClosed(SetupError):
    pass


class UnsupportedTransport(SetupError):
    pass


class SerializationError(SetupError):
    pass


class LaunchError(SetupError):
    pass


class ServiceError(SetupError):
    pass


class DocumentError(SetupError):
    pass


class ValidationError(ValueError):
    """Bad answer to a single prompt; the prompt engine re-asks."""
