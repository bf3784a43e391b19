"""이미지 업로드 검증 및 저장 테스트"""

import pytest

from snapshare.core.config import UploadConfig
from snapshare.services.storage_service import ImageStorage
from snapshare.utils.exceptions import BadRequestError, TransactionError
from tests.conftest import JPEG_BYTES, PNG_BYTES, make_upload


class TestValidate:
    """ImageStorage.validate 테스트"""

    def test_accepts_png_and_jpeg(self, storage: ImageStorage):
        assert storage.validate("a.PNG", PNG_BYTES) == "png"
        assert storage.validate("b.jpeg", JPEG_BYTES) == "jpeg"
        assert storage.validate("c.jpg", JPEG_BYTES) == "jpg"

    def test_rejects_disallowed_extension(self, storage: ImageStorage):
        with pytest.raises(BadRequestError):
            storage.validate("anim.gif", b"GIF89a")

    def test_rejects_empty_file(self, storage: ImageStorage):
        with pytest.raises(BadRequestError):
            storage.validate("a.png", b"")

    def test_rejects_oversized_file(self, image_dir):
        small = ImageStorage(str(image_dir), "/images", UploadConfig(max_size_bytes=16))
        with pytest.raises(BadRequestError):
            small.validate("a.png", PNG_BYTES)

    def test_rejects_mismatched_content(self, storage: ImageStorage):
        with pytest.raises(BadRequestError):
            storage.validate("fake.png", JPEG_BYTES)


class TestStoreAndDelete:
    """파일 저장/삭제 테스트"""

    @pytest.mark.asyncio
    async def test_store_renames_and_returns_public_url(self, storage: ImageStorage, image_dir):
        url = await storage.store(make_upload("holiday photo.png"))

        assert url.startswith("/images/")
        assert url.endswith(".png")
        name = url.rsplit("/", 1)[1]
        assert name != "holiday photo.png"
        assert (image_dir / name).read_bytes() == PNG_BYTES

    @pytest.mark.asyncio
    async def test_store_invalid_upload_writes_nothing(self, storage: ImageStorage, image_dir):
        with pytest.raises(BadRequestError):
            await storage.store(make_upload("doc.pdf", b"%PDF-1.4"))
        assert list(image_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_store_write_failure_is_transaction_error(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("x")
        broken = ImageStorage(str(blocker / "images"), "/images", UploadConfig())

        with pytest.raises(TransactionError):
            await broken.store(make_upload())

    @pytest.mark.asyncio
    async def test_delete_existing_file(self, storage: ImageStorage, image_dir):
        url = await storage.store(make_upload())

        assert storage.delete(url) is True
        assert list(image_dir.iterdir()) == []

    def test_delete_missing_file_is_reported_not_raised(self, storage: ImageStorage):
        assert storage.delete("/images/missing.png") is False
        assert storage.delete(None) is False

    def test_delete_only_uses_file_name(self, storage: ImageStorage, tmp_path):
        outside = tmp_path / "secret.png"
        outside.write_bytes(PNG_BYTES)

        assert storage.delete("/images/../secret.png") is False
        assert outside.exists()

    @pytest.mark.asyncio
    async def test_delete_many_counts_removed(self, storage: ImageStorage):
        first = await storage.store(make_upload())
        second = await storage.store(make_upload("b.jpg", JPEG_BYTES))

        assert storage.delete_many([first, second, "/images/gone.png"]) == 2
