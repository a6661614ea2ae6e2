"""
Synthetic container image generator.

Generates container images made of randomly filled layers, for load-testing
container registries and storage backends. Layer contents and layer order are
fully determined by a 64-bit seed.

Pipeline:
    1. A seeded RandomSource fills a pool of files with random letters
       (generated-files/<seed>/random_<size>KB_<index>.txt). Files already
       present are reused.
    2. The file list is shuffled with the same source.
    3. A Dockerfile adds each file as a layer on top of an empty image.
    4. Files and Dockerfile are streamed into an uncompressed tar archive.
    5. The archive is submitted to a container build CLI with the requested tags.

Entry points:
    - python -m image_generator: one generate-and-build run from the environment
    - app.py: HTTP service serving generated build contexts

Environment Variables:
    LOG_LEVEL, FLASK_HOST, FLASK_PORT, WORK_DIR, BASE_IMAGE_DIR, MANIFEST_NAME,
    ARCHIVE_NAME, SEED, LAYER_SIZE_KB, LAYER_COUNT, TAGS, FORCE_REGENERATE,
    BUILDER_BINARY, BUILD_TIMEOUT, MAX_LAYER_SIZE_KB, MAX_LAYER_COUNT,
    MAX_TAG_LENGTH
"""

__version__ = "0.1.0"

# Import key components for convenience
from .config import Config
from .errors import (
    ErrorKind,
    ImageGeneratorError,
    FilesystemError,
    SubmissionError,
    EncodingError,
)
from .rng import RandomSource, shuffle_in_place
from .pool import generate_random_file_pool
from .manifest import generate_dockerfile
from .archive import ArchiveEntry, create_archive, list_archive_entries
from .builder import submit_build
from .factory import BuildContext, RandomImageFactory

__all__ = [
    "Config",
    "ErrorKind",
    "ImageGeneratorError",
    "FilesystemError",
    "SubmissionError",
    "EncodingError",
    "RandomSource",
    "shuffle_in_place",
    "generate_random_file_pool",
    "generate_dockerfile",
    "ArchiveEntry",
    "create_archive",
    "list_archive_entries",
    "submit_build",
    "BuildContext",
    "RandomImageFactory",
]
