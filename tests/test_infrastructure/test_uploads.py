"""
Tests for upload file naming and storage
"""
import io
from datetime import datetime, timezone

from po_tracker.infrastructure.storage.uploads import (
    sanitize_filename, stored_filename, save_upload, delete_upload,
)


def test_sanitize_keeps_safe_characters():
    assert sanitize_filename("Quote v2.final-A.pdf") == "Quote v2.final-A.pdf"


def test_sanitize_replaces_unsafe_runs():
    assert sanitize_filename("a/b\\c?.pdf") == "a_b_c_.pdf"
    assert sanitize_filename("счёт.pdf") == "_.pdf"


def test_stored_filename_prefix_is_epoch_ms():
    now = datetime(2026, 1, 1, tzinfo=timezone.utc)
    assert stored_filename("po (1).pdf", now) == "1767225600000_po _1_.pdf"


def test_save_upload(tmp_path):
    now = datetime(2026, 1, 1, 0, 0, 0, 5000, tzinfo=timezone.utc)
    target = tmp_path / "nested" / "uploads"
    path = save_upload(target, "invoice.pdf", io.BytesIO(b"abc"), now)
    assert path == "/uploads/1767225600005_invoice.pdf"
    assert (target / "1767225600005_invoice.pdf").read_bytes() == b"abc"


def test_save_upload_never_overwrites(tmp_path):
    now = datetime(2026, 1, 1, tzinfo=timezone.utc)
    paths = [save_upload(tmp_path, "po.pdf", io.BytesIO(data), now) for data in (b"1", b"2", b"3")]
    assert paths == [
        "/uploads/1767225600000_po.pdf",
        "/uploads/1767225600000_1_po.pdf",
        "/uploads/1767225600000_2_po.pdf",
    ]
    assert (tmp_path / "1767225600000_po.pdf").read_bytes() == b"1"


def test_delete_upload(tmp_path):
    now = datetime(2026, 1, 1, tzinfo=timezone.utc)
    path = save_upload(tmp_path, "po.pdf", io.BytesIO(b"x"), now)
    delete_upload(tmp_path, path)
    delete_upload(tmp_path, path)
    assert list(tmp_path.iterdir()) == []
