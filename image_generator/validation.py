"""
Input validation module for the image generator HTTP service.

Provides validation functions for seeds, layer parameters and image tags.
"""

import logging
import re
from flask import abort

from .config import config
from .rng import SEED_MAX, SEED_MIN

logger = logging.getLogger(__name__)

# registry[:port]/path[:tag] or @digest, lowercase repository components
_TAG_PATTERN = re.compile(
    r"^[a-zA-Z0-9][a-zA-Z0-9.-]*(:[0-9]+)?(/[a-z0-9]+([._-][a-z0-9]+)*)*"
    r"(:[a-zA-Z0-9_][a-zA-Z0-9._-]{0,127})?$"
)


def validate_seed(seed) -> int:
    """
    Validate a seed from a request.

    Args:
        seed: Value from the request (int or numeric string)

    Returns:
        The seed as int

    Raises:
        HTTPException: 400 Bad Request if seed is not a signed 64-bit integer
    """
    if isinstance(seed, bool):
        abort(400, "Invalid seed: must be an integer")
    try:
        value = int(seed)
    except (TypeError, ValueError):
        logger.warning(f"Invalid seed: {seed!r}")
        abort(400, "Invalid seed: must be an integer")

    if not SEED_MIN <= value <= SEED_MAX:
        logger.warning(f"Seed out of range: {value}")
        abort(400, f"Invalid seed: must be between {SEED_MIN} and {SEED_MAX}")

    return value


def validate_layer_params(layer_size_kb, layer_count) -> tuple[int, int]:
    """
    Validate layer size and count from a request.

    Args:
        layer_size_kb: Layer size in KB (int or numeric string)
        layer_count: Number of layers (int or numeric string)

    Returns:
        Tuple of (layer_size_kb, layer_count) as ints

    Raises:
        HTTPException: 400 Bad Request if either value is missing, not an
            integer, negative, or above the configured limit

    Validation Rules:
        - 0 <= layer_size_kb <= MAX_LAYER_SIZE_KB (configurable)
        - 0 <= layer_count <= MAX_LAYER_COUNT (configurable)
    """
    values = []
    for name, value, limit in (
        ("layer_size_kb", layer_size_kb, config.MAX_LAYER_SIZE_KB),
        ("layer_count", layer_count, config.MAX_LAYER_COUNT),
    ):
        if value is None or isinstance(value, bool):
            logger.warning(f"Missing or invalid {name}: {value!r}")
            abort(400, f"Invalid {name}: an integer is required")
        try:
            parsed = int(value)
        except (TypeError, ValueError):
            logger.warning(f"Invalid {name}: {value!r}")
            abort(400, f"Invalid {name}: an integer is required")
        if parsed < 0 or parsed > limit:
            logger.warning(f"{name} out of range: {parsed}")
            abort(400, f"Invalid {name}: must be 0-{limit}")
        values.append(parsed)

    logger.debug(f"Layer parameters validated: size={values[0]}KB, count={values[1]}")
    return values[0], values[1]


def validate_tag(tag: str) -> None:
    """
    Validate an image tag (full image reference).

    Args:
        tag: Reference to validate, e.g. "registry.example.com/load/rando:v1"

    Raises:
        HTTPException: 400 Bad Request if tag is invalid

    Validation Rules:
        - Must be 1-{MAX_TAG_LENGTH} characters (configurable)
        - Optional registry host and port, lowercase repository path,
          optional :tag of up to 128 characters
        - No whitespace or shell metacharacters

    Examples:
        >>> validate_tag("registry.digitalocean.com/meow/rando")  # OK
        >>> validate_tag("localhost:5000/rando:latest")  # OK
        >>> validate_tag("rando;rm -rf")  # Raises 400
    """
    if not isinstance(tag, str) or not tag or len(tag) > config.MAX_TAG_LENGTH:
        logger.warning(f"Invalid tag: {tag!r}")
        abort(400, f"Invalid tag: must be a string of 1-{config.MAX_TAG_LENGTH} characters")

    if not _TAG_PATTERN.match(tag):
        logger.warning(f"Invalid tag format: {tag}")
        abort(400, "Invalid tag: must be an image reference like registry/repository:tag")

    logger.debug(f"Tag validated: {tag}")
