import logging
import uuid
from pathlib import Path, PurePosixPath
from typing import Optional

from fastapi import UploadFile

from snapshare.core.config import UploadConfig
from snapshare.utils.exceptions import BadRequestError, TransactionError

logger = logging.getLogger(__name__)

# 확장자별 파일 시그니처 (실제 내용이 선언된 형식과 일치하는지 확인)
IMAGE_SIGNATURES: dict[str, tuple[bytes, ...]] = {
    "jpg": (b"\xff\xd8\xff",),
    "jpeg": (b"\xff\xd8\xff",),
    "png": (b"\x89PNG\r\n\x1a\n",),
}


class ImageStorage:
    """
    업로드 이미지 저장소 (로컬 파일 시스템)
    - store(): 검증 후 저장하고 공개 URL 반환
    - delete(): 공개 URL에 해당하는 파일 삭제 (best-effort)
    """

    def __init__(self, image_dir: str, base_url: str, config: UploadConfig):
        self.image_dir = Path(image_dir)
        self.base_url = base_url.rstrip("/")
        self.config = config

    def validate(self, filename: Optional[str], content: bytes) -> str:
        """
        업로드 제약 조건 검사 후 소문자 확장자 반환
        Raises:
            BadRequestError: 확장자, 크기, 파일 내용이 허용되지 않을 때
        """
        ext = PurePosixPath(filename or "").suffix.lower().lstrip(".")
        if ext not in self.config.allowed_extensions:
            allowed = ", ".join(sorted(self.config.allowed_extensions))
            raise BadRequestError(f"허용되지 않은 파일 형식입니다. (허용: {allowed})")
        if not content:
            raise BadRequestError("빈 파일은 업로드할 수 없습니다.")
        if len(content) > self.config.max_size_bytes:
            raise BadRequestError(
                f"파일 크기가 너무 큽니다. (최대 {self.config.max_size_bytes // 1024}KB)"
            )
        signatures = IMAGE_SIGNATURES.get(ext, ())
        if signatures and not any(content.startswith(sig) for sig in signatures):
            raise BadRequestError("파일 내용이 이미지 형식과 일치하지 않습니다.")
        return ext

    def _target_name(self, filename: str, ext: str) -> str:
        if self.config.rename_on_store:
            return f"{uuid.uuid4().hex}.{ext}"
        return PurePosixPath(filename).name

    def _local_path(self, public_path: str) -> Path:
        # 경로 조작 방지를 위해 파일 이름만 사용
        return self.image_dir / PurePosixPath(public_path).name

    async def store(self, upload: UploadFile) -> str:
        """
        업로드 파일을 검증 후 저장하고 공개 URL을 반환
        """
        content = await upload.read()
        ext = self.validate(upload.filename, content)

        name = self._target_name(upload.filename, ext)
        try:
            self.image_dir.mkdir(parents=True, exist_ok=True)
            (self.image_dir / name).write_bytes(content)
        except OSError as e:
            logger.error("이미지 저장 실패 (%s): %s", name, e)
            raise TransactionError("이미지 저장 중 오류가 발생했습니다.") from e
        logger.info("이미지 저장 완료: %s (%d bytes)", name, len(content))
        return f"{self.base_url}/{name}"

    def delete(self, public_path: Optional[str]) -> bool:
        """
        저장된 이미지 삭제
        - 파일이 없거나 삭제 실패 시 False 반환 (예외를 던지지 않음)
        - DB 트랜잭션과 같은 원자성 경계에 있지 않으므로 실패해도 호출자의 작업은 유지됨
        """
        if not public_path:
            return False
        path = self._local_path(public_path)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.warning("삭제할 이미지가 없습니다: %s", path)
            return False
        except OSError as e:
            logger.error("이미지 삭제 실패 (%s): %s", path, e)
            return False
        logger.info("이미지 삭제 완료: %s", path)
        return True

    def delete_many(self, public_paths) -> int:
        """여러 이미지를 best-effort로 삭제하고 삭제된 개수 반환"""
        return sum(1 for path in public_paths if self.delete(path))
