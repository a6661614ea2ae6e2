"""
Flask application and image generator endpoints.

Serves generated build contexts to load-test clients and submits builds on
request.
"""

import logging
import os
import tempfile
import threading
from flask import Flask, send_file, abort, Response, jsonify, request

from . import __version__
from .archive import file_sha256, list_archive_entries
from .builder import submit_build
from .config import config
from .errors import ImageGeneratorError, SubmissionError
from .factory import RandomImageFactory
from .validation import validate_layer_params, validate_seed, validate_tag

logger = logging.getLogger(__name__)

# Create Flask app
app = Flask(__name__)

# One factory writes to the work directory at a time
_generation_lock = threading.Lock()


def _abort_for(error: ImageGeneratorError):
    """Translate a pipeline error into an HTTP error response."""
    logger.error(f"{error.kind.value} error: {error} (cause: {error.__cause__!r})")
    if isinstance(error, SubmissionError):
        abort(502, f"Build failed: {error}")
    abort(500, f"Generation failed: {error}")


def _discard(path: str):
    """Remove a served archive once its response is closed."""
    try:
        os.remove(path)
    except FileNotFoundError:
        pass


def _generate(seed: int, layer_size_kb: int, layer_count: int):
    """
    Generate a build context into a private temporary archive.

    Returns:
        Tuple of (BuildContext, archive_digest). The caller owns the archive
        file and must remove it.
    """
    fd, archive_path = tempfile.mkstemp(prefix="context-", suffix=".tar", dir=os.path.abspath(config.WORK_DIR))
    os.close(fd)

    try:
        with _generation_lock:
            factory = RandomImageFactory(seed, logger=logger)
            ctx = factory.generate_context(layer_size_kb, layer_count, archive_path=archive_path)
        digest = file_sha256(archive_path)
    except ImageGeneratorError as e:
        os.remove(archive_path)
        _abort_for(e)
    except OSError as e:
        os.remove(archive_path)
        logger.error(f"Failed to hash archive {archive_path}: {e}")
        abort(500, "Generation failed: could not read archive")

    return ctx, digest


# -------------------------------
# Endpoints
# -------------------------------


@app.route("/v1/")
def v1_root():
    """
    Service version check endpoint.

    Returns:
        JSON {"service": "image-generator", "version": "<version>"}
    """
    logger.info("API root accessed")
    return jsonify({"service": "image-generator", "version": __version__})


@app.route("/v1/contexts/<int(signed=True):seed>", methods=["GET", "HEAD"])
def get_context(seed):
    """
    Generate and return a build context archive.

    Args:
        seed: Seed for layer contents and order (validated)

    Query Parameters:
        layer_size_kb: Size of each layer file in KB (required)
        layer_count: Number of layer files (required)

    Response Headers:
        Content-Type: application/x-tar
        X-Context-Digest: SHA256 digest of the archive
        X-Layer-Count: Number of layer files in the archive
        X-Dockerfile: Manifest location inside the archive

    Returns:
        - GET: Uncompressed tar archive (layer files, then the manifest)
        - HEAD: Empty body with headers only

    Raises:
        400: Invalid seed or layer parameters
        500: Generation failed
    """
    seed = validate_seed(seed)
    layer_size_kb, layer_count = validate_layer_params(
        request.args.get("layer_size_kb"), request.args.get("layer_count")
    )
    logger.info(
        f"Context requested: seed={seed}, layer_size_kb={layer_size_kb}, "
        f"layer_count={layer_count}, method={request.method}"
    )

    ctx, digest = _generate(seed, layer_size_kb, layer_count)
    archive_size = os.path.getsize(ctx.archive_path)

    if request.method == "HEAD":
        os.remove(ctx.archive_path)
        resp = Response(status=200)
        resp.headers["Content-Type"] = "application/x-tar"
        resp.headers["Content-Length"] = archive_size
    else:
        resp = send_file(
            ctx.archive_path,
            mimetype="application/x-tar",
            download_name=f"context-{seed}.tar",
        )
        resp.call_on_close(lambda: _discard(ctx.archive_path))

    resp.headers["X-Context-Digest"] = digest
    resp.headers["X-Layer-Count"] = str(len(ctx.files))
    resp.headers["X-Dockerfile"] = ctx.dockerfile
    logger.info(f"Context sent: seed={seed}, digest={digest}, size={archive_size} bytes")
    return resp


@app.route("/v1/contexts/<int(signed=True):seed>/entries")
def get_context_entries(seed):
    """
    List the entries of a generated build context.

    Args:
        seed: Seed for layer contents and order (validated)

    Query Parameters:
        layer_size_kb, layer_count: as for get_context

    Response Format:
        {
            "seed": 4848484,
            "digest": "sha256:...",
            "dockerfile": "dockerfile.generated",
            "entries": [
                {"name": "...", "size": 1024, "mode": 384, "digest": "sha256:..."},
                ...
            ]
        }

    Raises:
        400: Invalid seed or layer parameters
        500: Generation failed
    """
    seed = validate_seed(seed)
    layer_size_kb, layer_count = validate_layer_params(
        request.args.get("layer_size_kb"), request.args.get("layer_count")
    )
    logger.info(f"Entries requested: seed={seed}, layer_size_kb={layer_size_kb}, layer_count={layer_count}")

    ctx, digest = _generate(seed, layer_size_kb, layer_count)
    try:
        entries = list_archive_entries(ctx.archive_path)
    except ImageGeneratorError as e:
        _abort_for(e)
    finally:
        os.remove(ctx.archive_path)

    return jsonify({
        "seed": seed,
        "digest": digest,
        "dockerfile": ctx.dockerfile,
        "entries": entries,
    })


@app.route("/v1/images", methods=["POST"])
def build_image():
    """
    Generate a build context and build a tagged image from it.

    Request Format:
        {
            "seed": 4848484,            # optional, default config.SEED
            "layer_size_kb": 1,
            "layer_count": 2,
            "tags": ["registry.example.com/load/rando:1"]   # optional, default config.TAGS
        }

    Response Format:
        {"seed": ..., "tags": [...], "layers": 2, "progress": ["Step 1/3 : FROM scratch", ...]}

    Raises:
        400: Invalid request body
        500: Generation failed
        502: Build failed
    """
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        abort(400, "Request body must be a JSON object")

    seed = validate_seed(body.get("seed", config.SEED))
    layer_size_kb, layer_count = validate_layer_params(body.get("layer_size_kb"), body.get("layer_count"))
    tags = body.get("tags", config.TAGS)
    if not isinstance(tags, list) or not tags:
        abort(400, "Invalid tags: a non-empty list is required")
    for tag in tags:
        validate_tag(tag)

    logger.info(f"Build requested: seed={seed}, layer_size_kb={layer_size_kb}, layer_count={layer_count}, tags={tags}")

    ctx, digest = _generate(seed, layer_size_kb, layer_count)
    try:
        progress = submit_build(ctx.archive_path, ctx.dockerfile, tags)
    except ImageGeneratorError as e:
        _abort_for(e)
    finally:
        os.remove(ctx.archive_path)

    logger.info(f"Image built: tags={tags}, context digest={digest}")
    return jsonify({
        "seed": seed,
        "tags": tags,
        "layers": len(ctx.files),
        "digest": digest,
        "progress": progress,
    })
