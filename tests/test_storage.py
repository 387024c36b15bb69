import pytest

from portal.services.storage_service import resolve_location, staged_file, store_file


def test_store_file_is_read_only(tmp_data):
    location = store_file("stu-1", "essay.pdf", b"bytes", data_path=tmp_data)
    path = resolve_location(location, data_path=tmp_data)
    assert path.read_bytes() == b"bytes"
    assert path.stat().st_mode & 0o222 == 0


def test_staged_file_kept_on_success(tmp_data):
    with staged_file("stu-1", "essay.pdf", b"bytes", data_path=tmp_data) as location:
        pass
    assert (tmp_data / location).is_file()


def test_staged_file_removed_on_failure(tmp_data):
    with pytest.raises(RuntimeError):
        with staged_file("stu-1", "essay.pdf", b"bytes", data_path=tmp_data) as location:
            raise RuntimeError("record not saved")
    assert not (tmp_data / location).exists()


def test_staged_file_leaves_existing_copy(tmp_data):
    location = store_file("stu-1", "essay.pdf", b"bytes", data_path=tmp_data)
    with pytest.raises(RuntimeError):
        with staged_file("stu-1", "essay.pdf", b"bytes", data_path=tmp_data):
            raise RuntimeError("record not saved")
    assert (tmp_data / location).is_file()
