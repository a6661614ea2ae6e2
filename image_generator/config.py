"""
Configuration module for the image generator.

Loads all configuration from environment variables with sensible defaults.
"""

import os

DEFAULT_TAGS = "registry.digitalocean.com/meow/rando"


def _optional_int(name: str) -> int | None:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return int(value)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _parse_tags(value: str) -> list[str]:
    return [tag.strip() for tag in value.split(",") if tag.strip()]


class Config:
    """
    Image generator configuration from environment variables.

    Loads all configuration values from environment variables with sensible defaults.
    All settings can be overridden by setting the corresponding environment variable.
    """

    def __init__(self):
        """
        Initialize configuration from environment variables.

        Environment Variables:
            LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR). Default: INFO
            FLASK_HOST: Server bind address. Default: 0.0.0.0
            FLASK_PORT: Server bind port. Default: 8080
            WORK_DIR: Directory holding the pool, manifest and archive. Default: cwd
            BASE_IMAGE_DIR: Pool directory, relative to WORK_DIR. Default: generated-files
            MANIFEST_NAME: Manifest file name in WORK_DIR. Default: dockerfile.generated
            ARCHIVE_NAME: Archive file name in WORK_DIR. Default: context.tar
            SEED: Seed for layer contents and order. Default: 4848484
            LAYER_SIZE_KB: Layer size in KB. No default
            LAYER_COUNT: Number of layers. No default
            TAGS: Comma separated image tags. Default: registry.digitalocean.com/meow/rando
            FORCE_REGENERATE: Rewrite pool files even if present. Default: false
            BUILDER_BINARY: Container build CLI. Default: docker
            BUILD_TIMEOUT: Build timeout in seconds. Default: 600
            MAX_LAYER_SIZE_KB: Largest layer accepted over HTTP. Default: 102400
            MAX_LAYER_COUNT: Most layers accepted over HTTP. Default: 1000
            MAX_TAG_LENGTH: Maximum tag length. Default: 255
        """
        # Logging
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

        # Server
        self.FLASK_HOST = os.getenv("FLASK_HOST", "0.0.0.0")
        self.FLASK_PORT = int(os.getenv("FLASK_PORT", "8080"))

        # Filesystem layout
        self.WORK_DIR = os.getenv("WORK_DIR") or os.getcwd()
        self.BASE_IMAGE_DIR = os.getenv("BASE_IMAGE_DIR", "generated-files")
        self.MANIFEST_NAME = os.getenv("MANIFEST_NAME", "dockerfile.generated")
        self.ARCHIVE_NAME = os.getenv("ARCHIVE_NAME", "context.tar")

        # Generation
        self.SEED = int(os.getenv("SEED", "4848484"))
        self.LAYER_SIZE_KB = _optional_int("LAYER_SIZE_KB")
        self.LAYER_COUNT = _optional_int("LAYER_COUNT")
        self.TAGS = _parse_tags(os.getenv("TAGS", DEFAULT_TAGS))
        self.FORCE_REGENERATE = _parse_bool(os.getenv("FORCE_REGENERATE", "false"))

        # Build submission
        self.BUILDER_BINARY = os.getenv("BUILDER_BINARY", "docker")
        self.BUILD_TIMEOUT = int(os.getenv("BUILD_TIMEOUT", "600"))  # seconds

        # Validation limits
        self.MAX_LAYER_SIZE_KB = int(os.getenv("MAX_LAYER_SIZE_KB", "102400"))
        self.MAX_LAYER_COUNT = int(os.getenv("MAX_LAYER_COUNT", "1000"))
        self.MAX_TAG_LENGTH = int(os.getenv("MAX_TAG_LENGTH", "255"))

    def __repr__(self):
        """String representation for logging."""
        return (
            f"Config(LOG_LEVEL={self.LOG_LEVEL}, "
            f"FLASK_HOST={self.FLASK_HOST}, "
            f"FLASK_PORT={self.FLASK_PORT}, "
            f"WORK_DIR={self.WORK_DIR}, "
            f"SEED={self.SEED}, "
            f"LAYER_SIZE_KB={self.LAYER_SIZE_KB}, "
            f"LAYER_COUNT={self.LAYER_COUNT}, "
            f"BUILDER_BINARY={self.BUILDER_BINARY})"
        )


# Global config instance
config = Config()
