import os

import pytest

from conftest import client_error


@pytest.fixture
def project(tmp_path):
    root = tmp_path / "project"
    (root / "src").mkdir(parents=True)
    (root / "README.md").write_text("# project")
    (root / "src" / "main.py").write_text("print('hi')")
    (root / "src" / "main.js.map").write_text("{}")
    return root


def test_upload_directory_into_current_folder(client, bucket, fake_s3, project):
    response = client.post(
        "/upload-paths",
        json={"bucket": bucket.id, "currentPath": "backups/", "files": [str(project)]},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Uploaded 3 files, 0 failed"
    assert body["totalFiles"] == 3
    assert body["failedFiles"] == []
    assert [item["key"] for item in body["uploadedFiles"]] == [
        "backups/project/README.md",
        "backups/project/src/main.js.map",
        "backups/project/src/main.py",
    ]
    assert body["uploadedFiles"][0] == {
        "status": "succeeded",
        "path": str(project / "README.md"),
        "key": "backups/project/README.md",
        "size": 9,
    }
    assert fake_s3.objects["backups/project/src/main.py"] == b"print('hi')"
    assert fake_s3.content_types["backups/project/src/main.js.map"] == "application/json"


def test_upload_with_base_path(client, bucket, fake_s3, project):
    response = client.post(
        "/upload-paths",
        json={
            "bucket": bucket.id,
            "basePath": str(project),
            "files": [str(project / "README.md"), str(project / "src")],
        },
    )

    assert response.status_code == 200
    assert sorted(fake_s3.objects) == ["README.md", "src/main.js.map", "src/main.py"]


def test_partial_failures_are_reported(client, bucket, fake_s3, project, tmp_path):
    missing = str(tmp_path / "missing.bin")

    response = client.post(
        "/upload-paths",
        json={"bucket": bucket.id, "files": [missing, str(project / "README.md")]},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Uploaded 1 files, 1 failed"
    assert body["totalFiles"] == 1
    assert body["failedFiles"][0]["path"] == missing
    assert body["failedFiles"][0]["status"] == "failed"
    assert body["failedFiles"][0]["kind"] == "partial_batch"
    assert "key" not in body["failedFiles"][0]
    assert list(fake_s3.objects) == ["README.md"]


def test_upstream_failures_keep_the_key(client, bucket, fake_s3, project):
    fake_s3.fail("put_object", client_error("SlowDown", "Please reduce your request rate", "PutObject"))

    response = client.post(
        "/upload-paths",
        json={"bucket": bucket.id, "files": [str(project / "README.md")]},
    )

    body = response.json()
    assert body["uploadedFiles"] == []
    failed = body["failedFiles"][0]
    assert failed["key"] == "README.md"
    assert failed["kind"] == "upstream"
    assert "reduce your request rate" in failed["error"]


def test_upload_requires_files(client, bucket):
    response = client.post("/upload-paths", json={"bucket": bucket.id, "files": []})

    assert response.status_code == 400
    assert response.json()["message"] == "no files provided"


def test_upload_requires_bucket(client, project):
    response = client.post("/upload-paths", json={"files": [str(project)]})

    assert response.status_code == 400


def test_upload_to_unknown_bucket(client, project):
    response = client.post("/upload-paths", json={"bucket": "ffffffff", "files": [str(project)]})

    assert response.status_code == 404


def test_count_files(client, project):
    response = client.post("/count-files", json={"path": str(project)})

    assert response.status_code == 200
    assert response.json() == {"count": 3, "path": str(project)}


def test_count_files_missing_path(client):
    assert client.post("/count-files", json={}).status_code == 400


def test_count_files_nonexistent_path(client, tmp_path):
    response = client.post("/count-files", json={"path": str(tmp_path / "nope")})

    assert response.status_code == 400
    assert "failed to stat path" in response.json()["message"]


@pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="named pipes not supported")
def test_named_pipe_in_folder_is_not_uploaded(client, bucket, fake_s3, project):
    os.mkfifo(str(project / "src" / "events.pipe"))

    response = client.post("/upload-paths", json={"bucket": bucket.id, "files": [str(project)]})

    body = response.json()
    assert body["message"] == "Uploaded 3 files, 0 failed"
    assert "project/src/events.pipe" not in fake_s3.objects
