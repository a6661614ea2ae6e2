"""
Build submission module for the image generator.

Hands a build context archive to a container build CLI (docker or a
compatible tool) that reads the context from stdin.
"""

import logging
import subprocess
import threading

from .config import config
from .errors import FilesystemError, SubmissionError

logger = logging.getLogger(__name__)


def build_command(dockerfile: str, tags: list[str], binary: str | None = None) -> list[str]:
    """
    Return the argv used to build from a context on stdin.

    Example:
        >>> build_command("dockerfile.generated", ["example.com/rando:1"])
        ['docker', 'build', '-f', 'dockerfile.generated', '-t', 'example.com/rando:1', '-']
    """
    cmd = [binary or config.BUILDER_BINARY, "build", "-f", dockerfile]
    for tag in tags:
        cmd.extend(["-t", tag])
    cmd.append("-")
    return cmd


def submit_build(
    archive_path: str,
    dockerfile: str,
    tags: list[str],
    binary: str | None = None,
    timeout: int | None = None,
) -> list[str]:
    """
    Build an image from archive_path and return the build progress output.

    Args:
        archive_path: Uncompressed tar build context
        dockerfile: Location of the manifest inside the archive
        tags: Tags applied to the built image
        binary: Build CLI to run. Default: config.BUILDER_BINARY
        timeout: Seconds before the build is abandoned. Default: config.BUILD_TIMEOUT

    Returns:
        Build output lines, in order

    Raises:
        FilesystemError: If the archive cannot be opened
        SubmissionError: If the build CLI is missing or cannot be started,
            fails or times out

    Behavior:
        - In DEBUG mode: streams build output line-by-line to logs
        - In normal mode: captures output and logs it once the build ends
        - The timeout applies in both modes; undecodable output bytes are replaced
        - Already generated files are left in place on failure
    """
    if timeout is None:
        timeout = config.BUILD_TIMEOUT
    cmd = build_command(dockerfile, tags, binary)

    logger.info(f"Submitting build context {archive_path} with tags {tags}")
    logger.debug(f"Running command: {' '.join(cmd)}")

    try:
        build_context = open(archive_path, "rb")
    except OSError as e:
        raise FilesystemError("failed to open tarball", archive_path) from e

    # Stream output in debug mode, capture in normal mode
    is_debug = logger.getEffectiveLevel() == logging.DEBUG
    output_lines = []

    with build_context:
        try:
            if is_debug:
                process = subprocess.Popen(
                    cmd,
                    stdin=build_context,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.STDOUT,  # Merge stderr into stdout
                    text=True,
                    errors="replace",
                    bufsize=1,  # Line buffered
                )

                # Reading stdout blocks until EOF, so the timeout is enforced by killing the build
                expired = threading.Event()

                def expire():
                    expired.set()
                    process.kill()

                watchdog = threading.Timer(timeout, expire)
                watchdog.start()
                try:
                    for line in process.stdout:
                        line = line.rstrip()
                        if line:
                            logger.debug(f"[build] {line}")
                            output_lines.append(line)
                    return_code = process.wait()
                finally:
                    watchdog.cancel()

                if expired.is_set():
                    raise subprocess.TimeoutExpired(cmd, timeout)
                if return_code != 0:
                    raise subprocess.CalledProcessError(return_code, cmd)
            else:
                result = subprocess.run(
                    cmd,
                    stdin=build_context,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.STDOUT,
                    text=True,
                    errors="replace",
                    timeout=timeout,
                )
                output_lines = [line.rstrip() for line in result.stdout.splitlines() if line.strip()]
                for line in output_lines:
                    logger.info(f"[build] {line}")
                if result.returncode != 0:
                    raise subprocess.CalledProcessError(result.returncode, cmd)

        except FileNotFoundError as e:
            logger.error(f"Build CLI not found: {cmd[0]}")
            raise SubmissionError("failed to run build CLI", cmd[0]) from e
        except OSError as e:
            logger.error(f"Build CLI could not be started: {cmd[0]}: {e}")
            raise SubmissionError("failed to run build CLI", cmd[0]) from e
        except subprocess.TimeoutExpired as e:
            logger.error(f"Build timed out after {timeout}s")
            raise SubmissionError(f"build timed out after {timeout}s", archive_path) from e
        except subprocess.CalledProcessError as e:
            logger.error(f"Build failed with exit code {e.returncode}")
            if output_lines:
                logger.error(f"Last build output: {output_lines[-1]}")
            raise SubmissionError(f"failed to build image (exit code {e.returncode})", archive_path) from e

    logger.info(f"Build complete: {', '.join(tags)}")
    return output_lines
