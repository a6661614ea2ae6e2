"""
Random file pool module for the image generator.

Fills a directory with layer files of random letters. Files are named by
layer size and index only, so a directory can be reused across runs without
regenerating anything.
"""

import logging
import os

from .errors import FilesystemError
from .rng import RandomSource

logger = logging.getLogger(__name__)


def layer_file_name(layer_size_kb: int, index: int) -> str:
    """
    Return the file name used for one layer.

    Example:
        >>> layer_file_name(64, 3)
        'random_64KB_3.txt'
    """
    return f"random_{layer_size_kb}KB_{index}.txt"


def check_layer_params(layer_size_kb: int, layer_count: int) -> None:
    """
    Reject layer parameters that are not non-negative integers.

    Raises:
        ValueError: If either value is negative or not an int
    """
    for name, value in (("layer_size_kb", layer_size_kb), ("layer_count", layer_count)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{name} must be an integer, got {type(value).__name__}")
        if value < 0:
            raise ValueError(f"{name} must not be negative, got {value}")


def generate_random_file_pool(
    image_dir: str,
    layer_size_kb: int,
    layer_count: int,
    source: RandomSource,
    force: bool = False,
) -> list[str]:
    """
    Ensure layer_count random files of layer_size_kb KB exist in image_dir.

    Args:
        image_dir: Directory holding the pool (created with mode 0700 if missing)
        layer_size_kb: Size of each file in KB (1024 bytes)
        layer_count: Number of files
        source: Random source, advanced across all files in index order
        force: Regenerate files even if they already exist

    Returns:
        File paths in index order 0..layer_count-1, whether newly written
        or already present

    Raises:
        ValueError: If layer_size_kb or layer_count is invalid
        FilesystemError: If the directory cannot be created, a file cannot
            be stat'ed for a reason other than not existing, or a write fails

    Caveat:
        An existing file is accepted as-is. Its contents are not compared
        against what the current seed would produce, so a file modified
        outside the generator is served stale. Skipped files still advance
        source by the bytes they would have taken, so the state left for
        later files and for the shuffle does not depend on what is on disk.
        Pass force=True to rewrite every file from the seed.
    """
    check_layer_params(layer_size_kb, layer_count)

    try:
        os.makedirs(image_dir, mode=0o700, exist_ok=True)
    except OSError as e:
        raise FilesystemError("failed creating directory", image_dir) from e

    size_bytes = 1024 * layer_size_kb
    paths = []
    written = 0

    for i in range(layer_count):
        file_path = os.path.join(image_dir, layer_file_name(layer_size_kb, i))
        paths.append(file_path)

        if not force:
            try:
                os.stat(file_path)
            except FileNotFoundError:
                pass
            except OSError as e:
                raise FilesystemError("error checking if file exists", file_path) from e
            else:
                # Advance the source as if the file had been written
                source.rand_bytes(size_bytes)
                logger.debug(f"Reusing existing layer file {file_path}")
                continue

        data = source.rand_bytes(size_bytes)
        try:
            with open(file_path, "wb") as f:
                f.write(data)
        except OSError as e:
            raise FilesystemError("error writing random bytes to file", file_path) from e
        written += 1
        logger.debug(f"Wrote {size_bytes} bytes to {file_path}")

    logger.info(
        f"File pool ready in {image_dir}: {layer_count} files of {layer_size_kb}KB, "
        f"{written} written, {layer_count - written} reused"
    )
    return paths
