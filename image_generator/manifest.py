"""
Dockerfile generation for the image generator.

The manifest adds each generated file as its own layer on top of an empty
base image, in the order given.
"""

import logging

from .archive import arcname
from .errors import EncodingError, FilesystemError

logger = logging.getLogger(__name__)

MANIFEST_HEADER = "FROM scratch\n"
ADD_DIRECTIVE = "ADD {name} /opt\n"


def render_dockerfile(file_paths: list[str], base_dir: str | None = None) -> str:
    """Return the Dockerfile text for file_paths."""
    lines = [MANIFEST_HEADER]
    for file_path in file_paths:
        lines.append(ADD_DIRECTIVE.format(name=arcname(file_path, base_dir)))
    return "".join(lines)


def generate_dockerfile(
    manifest_path: str,
    file_paths: list[str],
    base_dir: str | None = None,
) -> str:
    """
    Write a Dockerfile adding each of file_paths as a layer.

    Args:
        manifest_path: Where to write the Dockerfile (overwritten if present)
        file_paths: Layer files, in layer order
        base_dir: Directory the ADD sources are made relative to. Must match
            the base_dir used for the archive so the sources resolve inside
            the build context.

    Returns:
        manifest_path

    Raises:
        FilesystemError: If the file cannot be written
        EncodingError: If a path cannot be encoded as UTF-8

    Example:
        >>> generate_dockerfile("dockerfile.generated", ["generated-files/1/random_1KB_0.txt"])
        'dockerfile.generated'
        # FROM scratch
        # ADD generated-files/1/random_1KB_0.txt /opt
    """
    content = render_dockerfile(file_paths, base_dir)

    try:
        with open(manifest_path, "w", encoding="utf-8") as f:
            f.write(content)
    except UnicodeEncodeError as e:
        raise EncodingError("failed to encode manifest", manifest_path) from e
    except OSError as e:
        raise FilesystemError("failed to write manifest", manifest_path) from e

    logger.debug(f"Wrote manifest {manifest_path} with {len(file_paths)} layers")
    return manifest_path
