import os

import pytest

from s3deck.services.upload.upload import build_upload_plan, collect_files_from_path, count_files_helper
from s3deck.utils.errors import PathCollectionError, ValidationError


@pytest.fixture
def site(tmp_path):
    root = tmp_path / "site"
    (root / "css").mkdir(parents=True)
    (root / "js" / "vendor").mkdir(parents=True)
    (root / "empty").mkdir()
    (root / "index.html").write_text("<html></html>")
    (root / "css" / "app.css").write_text("body {}")
    (root / "js" / "app.js").write_text("run()")
    (root / "js" / "vendor" / "lib.js").write_text("lib()")
    return root


def test_single_file_yields_itself(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("hello")

    assert collect_files_from_path(str(path)) == [str(path)]


def test_directory_yields_every_file_recursively(site):
    files = collect_files_from_path(str(site))

    assert files == [
        os.path.join(str(site), "index.html"),
        os.path.join(str(site), "css", "app.css"),
        os.path.join(str(site), "js", "app.js"),
        os.path.join(str(site), "js", "vendor", "lib.js"),
    ]


def test_directories_are_not_collected(site):
    files = collect_files_from_path(str(site))

    assert all(os.path.isfile(path) for path in files)
    assert os.path.join(str(site), "empty") not in files


def test_missing_path_raises_descriptive_error(tmp_path):
    missing = tmp_path / "nope"

    with pytest.raises(PathCollectionError) as exc_info:
        collect_files_from_path(str(missing))

    assert "failed to stat path" in exc_info.value.message
    assert exc_info.value.path == str(missing)


def test_collection_is_repeatable(site):
    assert collect_files_from_path(str(site)) == collect_files_from_path(str(site))


def test_count_files(site):
    result = count_files_helper(str(site))

    assert result.count == 4
    assert result.path == str(site)


def test_count_files_requires_path():
    with pytest.raises(ValidationError):
        count_files_helper("")


needs_fifo = pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="named pipes not supported")


@needs_fifo
def test_named_pipes_are_skipped(site):
    os.mkfifo(str(site / "pipe"))

    files = collect_files_from_path(str(site))

    assert os.path.join(str(site), "pipe") not in files
    assert len(files) == 4


@needs_fifo
def test_named_pipe_root_is_rejected(tmp_path):
    pipe = tmp_path / "pipe"
    os.mkfifo(str(pipe))

    with pytest.raises(PathCollectionError) as exc_info:
        collect_files_from_path(str(pipe))

    assert "not a regular file or directory" in exc_info.value.message


def test_walk_error_discards_only_that_root(tmp_path, monkeypatch):
    bad = tmp_path / "bad"
    (bad / "sub").mkdir(parents=True)
    (bad / "top.txt").write_text("top")
    (bad / "sub" / "deep.txt").write_text("deep")
    good = tmp_path / "good.txt"
    good.write_text("good")

    real_scandir = os.scandir
    unreadable = str(bad / "sub")

    def scandir(path="."):
        if os.fspath(path) == unreadable:
            raise PermissionError(13, "Permission denied", unreadable)
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", scandir)

    plan, failures, total = build_upload_plan([str(bad), str(good)])

    assert [entry.remote_key for entry in plan] == ["good.txt"]
    assert total == 1
    assert len(failures) == 1
    assert failures[0].path == str(bad)
    assert failures[0].error.startswith("failed to process path: failed to walk directory")
