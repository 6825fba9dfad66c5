"""Tests for local upload storage."""

import io
from unittest.mock import patch

import pytest
from fastapi import UploadFile

from claimflow.core.exceptions import StorageError, ValidationError
from claimflow.services.storage_service import StorageService, StoredFile, safe_file_name


class TestSafeFileName:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("photo.jpg", "photo.jpg"),
            ("../../etc/passwd", "passwd"),
            ("C:/Users/me/car photo 1.png", "car_photo_1.png"),
            ("", "upload"),
            (None, "upload"),
            ("...", "upload"),
        ],
    )
    def test_cleans_client_names(self, raw, expected) -> None:
        assert safe_file_name(raw) == expected


class TestStorageService:
    @pytest.mark.asyncio
    async def test_save_writes_file_and_returns_url(self, storage: StorageService) -> None:
        upload = UploadFile(file=io.BytesIO(b"estimate"), filename="quote.pdf")

        stored = await storage.save(upload)

        assert stored.file_name == "quote.pdf"
        assert stored.url.startswith("/uploads/")
        on_disk = storage.upload_dir / stored.url.rsplit("/", 1)[1]
        assert on_disk.read_bytes() == b"estimate"
        # Same content can be read again by later consumers
        assert await upload.read() == b"estimate"

    @pytest.mark.asyncio
    async def test_same_name_does_not_collide(self, storage: StorageService) -> None:
        first = await storage.save(UploadFile(file=io.BytesIO(b"a"), filename="same.jpg"))
        second = await storage.save(UploadFile(file=io.BytesIO(b"b"), filename="same.jpg"))

        assert first.url != second.url
        assert len(list(storage.upload_dir.iterdir())) == 2

    @pytest.mark.asyncio
    async def test_rejects_oversized_files(self, storage: StorageService) -> None:
        upload = UploadFile(file=io.BytesIO(b"x" * 2048), filename="huge.bin")

        with pytest.raises(ValidationError, match="exceeds"):
            await storage.save(upload)
        assert not storage.upload_dir.exists()

    @pytest.mark.asyncio
    async def test_write_failure_is_storage_error(self, storage: StorageService) -> None:
        upload = UploadFile(file=io.BytesIO(b"data"), filename="a.txt")

        with patch.object(StorageService, "_write", side_effect=OSError("disk full")):
            with pytest.raises(StorageError, match="disk full"):
                await storage.save(upload)

    @pytest.mark.asyncio
    async def test_save_many_skips_empty_parts(self, storage: StorageService) -> None:
        files = [
            UploadFile(file=io.BytesIO(b"1"), filename="one.png"),
            UploadFile(file=io.BytesIO(b""), filename=""),
            UploadFile(file=io.BytesIO(b"2"), filename="two.png"),
        ]

        stored = await storage.save_many(files)

        assert [s.file_name for s in stored] == ["one.png", "two.png"]

    @pytest.mark.asyncio
    async def test_save_many_removes_earlier_files_when_one_fails(self, storage: StorageService) -> None:
        files = [
            UploadFile(file=io.BytesIO(b"ok"), filename="fine.png"),
            UploadFile(file=io.BytesIO(b"x" * 2048), filename="huge.png"),
        ]

        with pytest.raises(ValidationError):
            await storage.save_many(files)

        assert list(storage.upload_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_discard_removes_only_own_uploads(self, storage: StorageService, tmp_path) -> None:
        kept = await storage.save(UploadFile(file=io.BytesIO(b"keep"), filename="keep.png"))
        dropped = await storage.save(UploadFile(file=io.BytesIO(b"drop"), filename="drop.png"))
        outside = tmp_path / "outside.txt"
        outside.write_text("untouched")

        await storage.discard(
            [
                dropped,
                StoredFile(file_name="x", url="https://elsewhere.example/drop.png"),
                StoredFile(file_name="y", url="/uploads/../outside.txt"),
            ]
        )

        assert [p.name for p in storage.upload_dir.iterdir()] == [kept.url.rsplit("/", 1)[1]]
        assert outside.read_text() == "untouched"

    @pytest.mark.parametrize(
        "url,name",
        [
            ("/uploads/abc_photo.jpg", "abc_photo.jpg"),
            ("/uploads/", None),
            ("/uploads/../secret", None),
            ("/static/abc.jpg", None),
        ],
    )
    def test_path_for(self, storage: StorageService, url, name) -> None:
        path = storage.path_for(url)
        assert (path.name if path else None) == name
