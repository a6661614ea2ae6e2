"""
Random image factory.

Chains the pipeline for one run: random file pool, seeded shuffle, manifest,
archive, and optionally the build submission.
"""

import logging
import os
from dataclasses import dataclass, field

from .archive import ArchiveEntry, arcname, create_archive
from .builder import submit_build
from .config import config
from .manifest import generate_dockerfile
from .pool import generate_random_file_pool
from .rng import RandomSource, shuffle_in_place


@dataclass
class BuildContext:
    """Artifacts produced by one generation run."""

    archive_path: str
    manifest_path: str
    dockerfile: str  # manifest name inside the archive
    files: list[str]
    entries: list[ArchiveEntry] = field(default_factory=list)

    @property
    def total_size(self) -> int:
        return sum(entry.size for entry in self.entries)


class RandomImageFactory:
    """
    Generates random images with the given layer size and count.

    One factory owns its random source, its logger and the list of generated
    files for the duration of a run. Each run advances the random source, so
    a fresh factory is needed to reproduce a run; reruns in a populated work
    directory give the same layer order as the first. Two factories must not write
    to the same work directory at the same time.

    Args:
        seed: Signed 64-bit seed for layer contents and order
        source: Random source to use instead of one derived from seed
        logger: Logger for progress output. Default: this module's logger
        base_image_dir: Pool root, relative to work_dir. Default: config.BASE_IMAGE_DIR
        work_dir: Directory holding pool, manifest and archive. Default: config.WORK_DIR
        force_regenerate: Rewrite pool files even if present. Default: config.FORCE_REGENERATE

    Example:
        >>> factory = RandomImageFactory(4848484, work_dir="/tmp/images")
        >>> ctx = factory.generate_context(layer_size_kb=1, layer_count=2)
        >>> len(ctx.entries)
        3
    """

    def __init__(
        self,
        seed: int,
        *,
        source: RandomSource | None = None,
        logger: logging.Logger | None = None,
        base_image_dir: str | None = None,
        work_dir: str | None = None,
        force_regenerate: bool | None = None,
    ):
        self.seed = seed
        self.src = source if source is not None else RandomSource(seed)
        self.logger = logger if logger is not None else logging.getLogger(__name__)
        self.work_dir = os.path.abspath(work_dir or config.WORK_DIR)
        self.image_dir = os.path.join(
            self.work_dir,
            base_image_dir if base_image_dir is not None else config.BASE_IMAGE_DIR,
            str(seed),
        )
        self.force_regenerate = (
            config.FORCE_REGENERATE if force_regenerate is None else force_regenerate
        )
        self.generated_files: list[str] = []

    def __repr__(self):
        return f"RandomImageFactory(seed={self.seed}, image_dir={self.image_dir})"

    @property
    def manifest_path(self) -> str:
        return os.path.join(self.work_dir, config.MANIFEST_NAME)

    @property
    def archive_path(self) -> str:
        return os.path.join(self.work_dir, config.ARCHIVE_NAME)

    def generate_context(
        self,
        layer_size_kb: int,
        layer_count: int,
        archive_path: str | None = None,
    ) -> BuildContext:
        """
        Generate the file pool, manifest and archive for one image.

        Args:
            layer_size_kb: Size of each layer file in KB
            layer_count: Number of layer files
            archive_path: Where to write the archive. Default: self.archive_path

        Returns:
            BuildContext describing the artifacts written

        Raises:
            ValueError: If layer parameters are invalid
            FilesystemError: On any filesystem failure. Artifacts already
                written are left on disk.
            EncodingError: If a path cannot be encoded
        """
        archive_path = archive_path or self.archive_path
        self.logger.info(
            f"Generating build context: seed={self.seed}, "
            f"layer_size_kb={layer_size_kb}, layer_count={layer_count}"
        )

        self.generated_files = generate_random_file_pool(
            self.image_dir,
            layer_size_kb,
            layer_count,
            self.src,
            force=self.force_regenerate,
        )

        shuffle_in_place(self.generated_files, self.src)

        manifest_path = generate_dockerfile(
            self.manifest_path, self.generated_files, base_dir=self.work_dir
        )

        files = self.generated_files + [manifest_path]
        entries = create_archive(archive_path, files, base_dir=self.work_dir)

        ctx = BuildContext(
            archive_path=archive_path,
            manifest_path=manifest_path,
            dockerfile=arcname(manifest_path, self.work_dir),
            files=list(self.generated_files),
            entries=entries,
        )
        self.logger.info(
            f"Build context ready: {archive_path}, {len(entries)} entries, {ctx.total_size} bytes"
        )
        return ctx

    def generate_image(self, layer_size_kb: int, layer_count: int, tags: list[str]) -> list[str]:
        """
        Generate a build context and build a tagged image from it.

        Args:
            layer_size_kb: Size of each layer file in KB
            layer_count: Number of layer files
            tags: Tags for the built image

        Returns:
            Build progress output lines

        Raises:
            FilesystemError, EncodingError: From generate_context
            SubmissionError: If the build fails
        """
        ctx = self.generate_context(layer_size_kb, layer_count)
        return submit_build(ctx.archive_path, ctx.dockerfile, tags)
