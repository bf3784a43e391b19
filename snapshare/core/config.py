from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import FrozenSet, List, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# 프로젝트 루트 디렉토리
BASE_DIR = Path(__file__).resolve().parent.parent


def _resolve_path(path_str: str) -> str:
    """
    입력된 경로가 절대 경로인지 확인하고 상대 경로일 경우 BASE_DIR 기준으로 변환
    """
    path = Path(path_str)
    return str(path if path.is_absolute() else BASE_DIR / path)


@dataclass(frozen=True)
class UploadConfig:
    """
    이미지 업로드 제약 조건
    - allowed_extensions: 허용 확장자 (소문자, 점 제외)
    - max_size_bytes: 최대 파일 크기
    - rename_on_store: 저장 시 무작위 파일명으로 변경 여부
    """
    allowed_extensions: FrozenSet[str] = field(
        default_factory=lambda: frozenset({"jpg", "jpeg", "png"})
    )
    max_size_bytes: int = 10000 * 1024
    rename_on_store: bool = True


class Settings(BaseSettings):
    """
    애플리케이션 환경 설정 모델
    - config/settings.env 파일 및 환경 변수를 자동 로드
    """
    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / "config" / "settings.env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Security & Session
    JWT_SECRET_KEY: str
    SESSION_EXPIRES_MINUTES: int = Field(
        60 * 24,
        description="세션(액세스 토큰) 만료 시간(분)",
    )
    SESSION_COOKIE_NAME: str = Field(
        "session_token",
        description="세션 토큰을 담는 쿠키 이름",
    )
    SESSION_COOKIE_SECURE: bool = False

    # Database
    DB_USER:     str = "snapshare"
    DB_PASSWORD: str = "snapshare_pw"
    DB_HOST:     str = "localhost"
    DB_PORT:     int = 3306
    DB_NAME:     str = "snapshare"
    DATABASE_URL: Optional[str] = Field(
        None,
        description="전체 DB 연결 URL (우선순위: env > 자동 조합)",
    )
    DB_ECHO: bool = False

    # Image storage
    IMAGE_DIR: str = Field(
        default=str(BASE_DIR / "images"),
        description="업로드 이미지 저장 디렉토리",
    )
    IMAGE_BASE_URL: str = Field(
        "/images",
        description="저장된 이미지의 공개 URL 접두어",
    )
    UPLOAD_ALLOWED_EXTENSIONS: List[str] = ["jpg", "jpeg", "png"]
    UPLOAD_MAX_SIZE_KB: int = 10000

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    @field_validator("IMAGE_DIR", mode="before")
    @classmethod
    def _validate_paths(cls, v: str) -> str:
        """
        파일 경로 필드가 절대 경로가 아닐 경우 BASE_DIR 기준으로 변환
        """
        return _resolve_path(v)

    @model_validator(mode="after")
    def _assemble_database_url(self) -> "Settings":
        """
        DATABASE_URL이 설정되어 있으면 그대로 사용하고, 없으면 개별 DB 설정값으로 URL을 조합
        """
        if not self.DATABASE_URL:
            self.DATABASE_URL = (
                f"mysql+asyncmy://{self.DB_USER}:{self.DB_PASSWORD}"
                f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}?charset=utf8mb4"
            )
        return self

    @property
    def upload_config(self) -> UploadConfig:
        """
        업로드 관련 설정값을 UploadConfig 구조체로 묶어 반환
        """
        return UploadConfig(
            allowed_extensions=frozenset(
                ext.lower().lstrip(".") for ext in self.UPLOAD_ALLOWED_EXTENSIONS
            ),
            max_size_bytes=self.UPLOAD_MAX_SIZE_KB * 1024,
            rename_on_store=True,
        )


@lru_cache()
def get_settings() -> Settings:
    """
    Settings 인스턴스를 싱글톤으로 반환
    최초 호출 시 객체를 생성하고, 이후 캐싱된 인스턴스를 반환
    """
    return Settings()


# 전역 설정 인스턴스
settings = get_settings()
