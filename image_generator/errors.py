"""
Error types for the image generator.

Every failure raised by the generation pipeline is an ImageGeneratorError
subclass tagged with an ErrorKind and, where one is involved, the offending
path. The underlying exception is chained with ``raise ... from err`` so it
stays reachable through ``__cause__``.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Broad category of a pipeline failure."""

    FILESYSTEM = "filesystem"
    SUBMISSION = "submission"
    ENCODING = "encoding"


class ImageGeneratorError(Exception):
    """
    Base class for all image generation failures.

    Args:
        message: Description of the failed operation
        path: Filesystem path involved in the failure, if any

    Example:
        >>> try:
        ...     generate_random_file_pool("/proc/nope", 1, 1, source)
        ... except ImageGeneratorError as e:
        ...     print(e.kind, e.path, repr(e.__cause__))
    """

    kind: ErrorKind

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self):
        if self.path is None:
            return self.message
        return f"{self.message}: {self.path!r}"


class FilesystemError(ImageGeneratorError):
    """Directory creation, stat, read or write failure."""

    kind = ErrorKind.FILESYSTEM


class SubmissionError(ImageGeneratorError):
    """The build daemon rejected the archive or could not be reached."""

    kind = ErrorKind.SUBMISSION


class EncodingError(ImageGeneratorError):
    """A path could not be encoded into the manifest or archive."""

    kind = ErrorKind.ENCODING
