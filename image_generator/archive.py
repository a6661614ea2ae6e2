"""
Build context archive module for the image generator.

Writes the generated layer files and the manifest into a single uncompressed
tar archive that a build daemon accepts as its build context, and reads such
archives back for inspection.
"""

import hashlib
import logging
import os
import tarfile
from dataclasses import dataclass

from .errors import EncodingError, FilesystemError

logger = logging.getLogger(__name__)

ARCHIVE_ENTRY_MODE = 0o600
_HASH_CHUNK_SIZE = 1024 * 1024


@dataclass(frozen=True)
class ArchiveEntry:
    """Name and byte size of one entry written to an archive."""

    name: str
    size: int


def compute_sha256(data: bytes) -> str:
    """
    Compute SHA256 digest in OCI/Docker format.

    Args:
        data: Bytes to hash

    Returns:
        String in format "sha256:<64 hex chars>"

    Example:
        >>> compute_sha256(b"hello")
        'sha256:2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    h = hashlib.sha256()
    h.update(data)
    return "sha256:" + h.hexdigest()


def file_sha256(path: str) -> str:
    """Compute the SHA256 digest of a file without reading it into memory at once."""
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(_HASH_CHUNK_SIZE), b""):
            h.update(chunk)
    return "sha256:" + h.hexdigest()


def arcname(path: str, base_dir: str | None = None) -> str:
    """
    Return the name a file is stored under inside the archive.

    Args:
        path: Path of the file on disk
        base_dir: Directory the name is made relative to. When None the
            path is only normalized.

    Examples:
        >>> arcname("./generated-files/1/random_1KB_0.txt")
        'generated-files/1/random_1KB_0.txt'
        >>> arcname("/work/dockerfile.generated", "/work")
        'dockerfile.generated'
    """
    if base_dir is not None:
        path = os.path.relpath(path, base_dir)
    return os.path.normpath(path).replace(os.sep, "/")


def create_archive(
    archive_path: str,
    file_paths: list[str],
    base_dir: str | None = None,
) -> list[ArchiveEntry]:
    """
    Write file_paths into an uncompressed tar archive at archive_path.

    Any existing archive at archive_path is overwritten. Entries are written
    in the order given, each with mode 0600 and the exact byte size of the
    file at the time it is opened. Files are streamed one at a time, so the
    number and size of entries is not bounded by memory.

    Args:
        archive_path: Destination of the archive
        file_paths: Files to include, in order
        base_dir: Directory entry names are made relative to (see arcname)

    Returns:
        List of ArchiveEntry in archive order

    Raises:
        FilesystemError: If the archive cannot be created or a file cannot be
            stat'ed, read or written. The partial archive is left on disk.
        EncodingError: If a path cannot be encoded

    Example:
        >>> create_archive("context.tar", ["a.txt", "dockerfile.generated"])
        [ArchiveEntry(name='a.txt', size=1024), ArchiveEntry(name='dockerfile.generated', size=34)]
    """
    logger.debug(f"Creating archive {archive_path} with {len(file_paths)} entries")

    try:
        tar = tarfile.open(archive_path, "w", format=tarfile.PAX_FORMAT)
    except OSError as e:
        raise FilesystemError("failed to create tar archive", archive_path) from e

    entries = []
    with tar:
        for file_path in file_paths:
            name = arcname(file_path, base_dir)

            try:
                f = open(file_path, "rb")
            except UnicodeEncodeError as e:
                raise EncodingError("failed to encode file path", file_path) from e
            except OSError as e:
                raise FilesystemError("failed to read file", file_path) from e

            with f:
                try:
                    size = os.fstat(f.fileno()).st_size
                except OSError as e:
                    raise FilesystemError("failed to read file info", file_path) from e

                info = tarfile.TarInfo(name)
                info.mode = ARCHIVE_ENTRY_MODE
                info.size = size

                try:
                    tar.addfile(info, f)
                except UnicodeEncodeError as e:
                    raise EncodingError("failed to encode tar header", file_path) from e
                except OSError as e:
                    raise FilesystemError("failed to write tar entry", file_path) from e

            entries.append(ArchiveEntry(name=name, size=size))
            logger.debug(f"Archived {name} ({size} bytes)")

    total_size = sum(entry.size for entry in entries)
    logger.info(f"Archive written: {archive_path}, {len(entries)} entries, {total_size} bytes")
    return entries


def list_archive_entries(archive_path: str) -> list[dict]:
    """
    Read back the entries of an archive written by create_archive.

    Entries are read one at a time; only the entry being hashed is held in
    memory.

    Args:
        archive_path: Path to an uncompressed tar archive

    Returns:
        List of dicts with keys "name", "size", "mode" and "digest", in
        archive order

    Raises:
        FilesystemError: If the archive cannot be opened or read
    """
    entries = []
    try:
        with tarfile.open(archive_path, "r:") as tar:
            for member in tar:
                if not member.isfile():
                    continue
                data = tar.extractfile(member).read()
                entries.append({
                    "name": member.name,
                    "size": member.size,
                    "mode": member.mode,
                    "digest": compute_sha256(data),
                })
    except (OSError, tarfile.TarError) as e:
        raise FilesystemError("failed to read tar archive", archive_path) from e

    logger.debug(f"Listed {len(entries)} entries from {archive_path}")
    return entries
