"""Tests for the HTTP service."""

import io
import tarfile

import pytest

from image_generator import __version__
from image_generator import routes as routes_module
from image_generator.archive import compute_sha256
from image_generator.errors import SubmissionError
from image_generator.routes import app


@pytest.fixture
def client(work_dir):
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client


def _leftover_archives(work_dir):
    return sorted(p.name for p in work_dir.glob("context-*.tar"))


def test_root(client):
    """The root endpoint reports the service version."""
    resp = client.get("/v1/")

    assert resp.status_code == 200
    assert resp.get_json() == {"service": "image-generator", "version": __version__}


def test_get_context(client):
    """A context request returns the generated tar archive."""
    resp = client.get("/v1/contexts/4848484?layer_size_kb=1&layer_count=2")

    assert resp.status_code == 200
    assert resp.mimetype == "application/x-tar"
    assert resp.headers["X-Layer-Count"] == "2"
    assert resp.headers["X-Dockerfile"] == "dockerfile.generated"
    assert resp.headers["X-Context-Digest"] == compute_sha256(resp.data)

    with tarfile.open(fileobj=io.BytesIO(resp.data)) as tar:
        members = tar.getmembers()
    assert len(members) == 3
    assert members[-1].name == "dockerfile.generated"
    assert sorted(m.name for m in members[:-1]) == [
        "generated-files/4848484/random_1KB_0.txt",
        "generated-files/4848484/random_1KB_1.txt",
    ]
    assert all(m.mode == 0o600 for m in members)
    resp.close()


def test_get_context_is_reproducible(client):
    """The same request returns the same archive bytes."""
    first = client.get("/v1/contexts/7?layer_size_kb=1&layer_count=3")
    second = client.get("/v1/contexts/7?layer_size_kb=1&layer_count=3")

    assert first.headers["X-Context-Digest"] == second.headers["X-Context-Digest"]
    first.close()
    second.close()


def test_get_context_negative_seed(client):
    """Negative seeds are accepted in the URL."""
    resp = client.get("/v1/contexts/-3?layer_size_kb=0&layer_count=1")

    assert resp.status_code == 200
    assert resp.headers["X-Layer-Count"] == "1"
    resp.close()


def test_head_context(client, work_dir):
    """HEAD returns the headers and removes the temporary archive."""
    resp = client.head("/v1/contexts/1?layer_size_kb=1&layer_count=1")

    assert resp.status_code == 200
    assert resp.headers["X-Layer-Count"] == "1"
    assert resp.headers["X-Context-Digest"].startswith("sha256:")
    assert _leftover_archives(work_dir) == []


@pytest.mark.parametrize("query", [
    "layer_size_kb=1",
    "layer_count=1",
    "layer_size_kb=abc&layer_count=1",
    "layer_size_kb=1&layer_count=-1",
])
def test_get_context_bad_params(client, query):
    """Missing or invalid layer parameters are rejected."""
    resp = client.get(f"/v1/contexts/1?{query}")

    assert resp.status_code == 400


def test_get_context_over_limit(client, monkeypatch):
    """Layer counts above the configured limit are rejected."""
    monkeypatch.setattr(routes_module.config, "MAX_LAYER_COUNT", 2)

    resp = client.get("/v1/contexts/1?layer_size_kb=1&layer_count=3")

    assert resp.status_code == 400


def test_get_context_entries(client, work_dir):
    """The entry listing matches the archive and cleans up after itself."""
    resp = client.get("/v1/contexts/4848484/entries?layer_size_kb=1&layer_count=2")

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["seed"] == 4848484
    assert body["dockerfile"] == "dockerfile.generated"
    assert body["digest"].startswith("sha256:")
    assert [e["name"] for e in body["entries"]][-1] == "dockerfile.generated"
    assert [e["size"] for e in body["entries"]][:2] == [1024, 1024]
    assert all(e["mode"] == 0o600 for e in body["entries"])
    assert _leftover_archives(work_dir) == []


def test_build_image(client, monkeypatch, work_dir):
    """A build request generates a context and submits it with the tags."""
    calls = []

    def fake_submit(archive_path, dockerfile, tags):
        calls.append((dockerfile, tags))
        with tarfile.open(archive_path) as tar:
            assert len(tar.getmembers()) == 3
        return ["Step 1/3 : FROM scratch", "Successfully built 0123456789ab"]

    monkeypatch.setattr(routes_module, "submit_build", fake_submit)

    resp = client.post("/v1/images", json={
        "seed": 4848484,
        "layer_size_kb": 1,
        "layer_count": 2,
        "tags": ["localhost:5000/rando:1"],
    })

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["layers"] == 2
    assert body["tags"] == ["localhost:5000/rando:1"]
    assert body["progress"][-1] == "Successfully built 0123456789ab"
    assert calls == [("dockerfile.generated", ["localhost:5000/rando:1"])]
    assert _leftover_archives(work_dir) == []


def test_build_image_default_tags(client, monkeypatch):
    """Tags default to the configured list."""
    monkeypatch.setattr(routes_module.config, "TAGS", ["registry.example.com/load/rando"])
    monkeypatch.setattr(routes_module, "submit_build", lambda archive_path, dockerfile, tags: [])

    resp = client.post("/v1/images", json={"layer_size_kb": 0, "layer_count": 1})

    assert resp.status_code == 200
    assert resp.get_json()["tags"] == ["registry.example.com/load/rando"]


@pytest.mark.parametrize("body", [
    None,
    {"layer_size_kb": 1},
    {"layer_size_kb": 1, "layer_count": 1, "tags": []},
    {"layer_size_kb": 1, "layer_count": 1, "tags": ["bad tag"]},
    {"layer_size_kb": 1, "layer_count": 1, "seed": "abc"},
])
def test_build_image_bad_request(client, body):
    """Invalid bodies are rejected before anything is generated."""
    resp = client.post("/v1/images", json=body)

    assert resp.status_code == 400


def test_build_image_submission_failure(client, monkeypatch, work_dir):
    """Build failures surface as 502 and the temporary archive is removed."""
    def fake_submit(archive_path, dockerfile, tags):
        raise SubmissionError("failed to build image (exit code 1)", archive_path)

    monkeypatch.setattr(routes_module, "submit_build", fake_submit)

    resp = client.post("/v1/images", json={"layer_size_kb": 1, "layer_count": 1, "tags": ["rando"]})

    assert resp.status_code == 502
    assert _leftover_archives(work_dir) == []
