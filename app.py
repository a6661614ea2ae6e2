"""
Synthetic container image generator service.

Serves seeded build contexts (random layer files plus a generated Dockerfile,
packed into an uncompressed tar) to load-test clients, and builds tagged
images from them on request.

Architecture:
    1. Client requests a context (GET /v1/contexts/<seed>?layer_size_kb=&layer_count=)
    2. Service fills generated-files/<seed>/ with random layer files,
       reusing files already present
    3. Service shuffles the files with the seeded source and writes the Dockerfile
    4. Service streams files and Dockerfile into a tar archive and returns it
    5. Optionally (POST /v1/images) the archive is submitted to the build CLI

Endpoints:
    - GET /v1/ - Version check
    - GET/HEAD /v1/contexts/<seed> - Generated build context archive
    - GET /v1/contexts/<seed>/entries - Archive entry listing
    - POST /v1/images - Generate and build a tagged image

Environment Variables:
    LOG_LEVEL, FLASK_HOST, FLASK_PORT, WORK_DIR, BASE_IMAGE_DIR, SEED, TAGS,
    FORCE_REGENERATE, BUILDER_BINARY, BUILD_TIMEOUT, MAX_LAYER_SIZE_KB,
    MAX_LAYER_COUNT, MAX_TAG_LENGTH

Example:
    $ LOG_LEVEL=DEBUG python app.py
    $ curl -o context.tar "localhost:8080/v1/contexts/4848484?layer_size_kb=64&layer_count=10"
    $ docker build -f dockerfile.generated -t localhost:5000/rando:1 - < context.tar
"""

import logging

from image_generator.config import config
from image_generator.routes import app

# Configure logging
logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def main():
    """Main entry point for the image generator service."""
    debug_mode = logger.getEffectiveLevel() == logging.DEBUG
    logger.info(f"Starting image generator service on {config.FLASK_HOST}:{config.FLASK_PORT}")
    logger.info(f"Configuration: {config}")
    logger.info(f"Log level: {logging.getLevelName(logger.getEffectiveLevel())}")
    if debug_mode:
        logger.info("Flask debug mode enabled")
    app.run(host=config.FLASK_HOST, port=config.FLASK_PORT, debug=debug_mode)


if __name__ == "__main__":
    main()
