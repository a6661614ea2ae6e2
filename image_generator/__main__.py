"""
Generate and build one random image from environment configuration.

Example:
    $ LAYER_SIZE_KB=64 LAYER_COUNT=10 SEED=1 TAGS=localhost:5000/rando:1 python -m image_generator
"""

import logging
import sys

from .config import config
from .errors import ImageGeneratorError
from .factory import RandomImageFactory

logger = logging.getLogger("image_generator")


def main() -> int:
    """Run one generation and build. Returns the process exit code."""
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info(f"Configuration: {config}")

    if config.LAYER_SIZE_KB is None or config.LAYER_COUNT is None:
        logger.error("LAYER_SIZE_KB and LAYER_COUNT must both be set")
        return 2

    try:
        factory = RandomImageFactory(config.SEED, logger=logger)
        factory.generate_image(config.LAYER_SIZE_KB, config.LAYER_COUNT, config.TAGS)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2
    except ImageGeneratorError as e:
        logger.error(f"Image generation failed ({e.kind.value}): {e}: {e.__cause__}")
        return 1

    logger.info(f"Image built: {', '.join(config.TAGS)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
