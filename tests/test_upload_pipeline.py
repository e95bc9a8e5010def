import pytest

from songvault.core import metadata_index
from songvault.core.errors import (
    DuplicateObjectError,
    IndexWriteError,
    StorageWriteError,
    ValidationError,
)
from songvault.core.upload_pipeline import UploadPipeline

META = {"title": "Song", "artist": "A, B", "album": "Album", "language": "english"}


@pytest.fixture
def pipeline(store, index):
    return UploadPipeline(store, index)


def _read_all(store, name):
    with store.open_read(name) as reader:
        return b"".join(reader)


def test_upload_stores_object_then_indexes_it(pipeline, store, index):
    stored = pipeline.upload("song.mp3", "audio/mpeg", [b"hello ", b"world"], **META)

    assert stored.length == 11
    assert _read_all(store, "song.mp3") == b"hello world"
    [record] = index.all()
    assert record.filename == "song.mp3"
    assert record.title == "Song"
    assert record.artists == ["A", "B"]


@pytest.mark.parametrize("field", ["title", "artist", "album", "language"])
@pytest.mark.parametrize("value", [None, "", "   "])
def test_missing_metadata_writes_nothing(pipeline, store, index, field, value):
    meta = dict(META, **{field: value})
    with pytest.raises(ValidationError):
        pipeline.upload("song.mp3", "audio/mpeg", [b"data"], **meta)
    assert not store.exists("song.mp3")
    assert index.all() == []


def test_missing_file_writes_nothing(pipeline, store, index):
    with pytest.raises(ValidationError):
        pipeline.upload(None, None, None, **META)
    with pytest.raises(ValidationError):
        pipeline.upload("", "audio/mpeg", [b"data"], **META)
    assert index.all() == []


def test_artist_of_only_delimiters_is_rejected(pipeline, store):
    with pytest.raises(ValidationError):
        pipeline.upload("song.mp3", None, [b"data"], **dict(META, artist=" , ,"))
    assert not store.exists("song.mp3")


def test_artist_is_normalized(pipeline, index):
    pipeline.upload("song.mp3", None, [b"data"], **dict(META, artist=" A ,B,, C "))
    assert index.all()[0].artist == "A, B, C"


def test_empty_file_rejected_by_default(pipeline, store, index):
    with pytest.raises(ValidationError):
        pipeline.upload("empty.mp3", "audio/mpeg", [b"", b""], **META)
    assert not store.exists("empty.mp3")
    assert index.all() == []


def test_empty_file_stored_when_allowed(store, index):
    pipeline = UploadPipeline(store, index, allow_empty=True)
    stored = pipeline.upload("empty.mp3", "audio/mpeg", [], **META)

    assert stored.length == 0
    assert store.exists("empty.mp3")
    assert _read_all(store, "empty.mp3") == b""
    assert [s.filename for s in index.all()] == ["empty.mp3"]


def test_duplicate_filename_rejected(pipeline, store, index):
    pipeline.upload("song.mp3", None, [b"first"], **META)
    with pytest.raises(DuplicateObjectError):
        pipeline.upload("song.mp3", None, [b"second"], **META)
    assert _read_all(store, "song.mp3") == b"first"
    assert len(index.all()) == 1


def test_storage_failure_does_not_touch_index(pipeline, store, index):
    def failing():
        yield b"data"
        raise OSError("disk full")

    with pytest.raises(StorageWriteError) as excinfo:
        pipeline.upload("song.mp3", None, failing(), **META)
    assert not excinfo.value.object_stored
    assert not store.exists("song.mp3")
    assert index.all() == []


def test_index_failure_reports_partial_success(pipeline, store, index, monkeypatch):
    def fail(path, records):
        raise OSError("read-only filesystem")

    monkeypatch.setattr(metadata_index, "save_records", fail)
    with pytest.raises(IndexWriteError) as excinfo:
        pipeline.upload("orphan.mp3", None, [b"data"], **META)

    assert excinfo.value.object_stored
    assert store.exists("orphan.mp3")
    assert index.all() == []
