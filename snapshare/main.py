import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Type

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from fastapi.staticfiles import StaticFiles

from snapshare.core.config import settings
from snapshare.core.database import init_db
from snapshare.routers.auth_router import router as auth_router
from snapshare.routers.comment_router import router as comment_router
from snapshare.routers.post_router import router as post_router
from snapshare.routers.user_router import router as user_router
from snapshare.utils.exceptions import (
    ApiError, BadRequestError, ConflictError,
    NotFoundError, TransactionError, UnauthorizedError
)

logger = logging.getLogger(__name__)

# ─── 애플리케이션 수명 주기 이벤트 핸들러 정의 ─────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    앱 시작 시 DB 초기화 및 이미지 디렉토리 생성
    """
    # DB 테이블 자동 생성
    await init_db()

    # 업로드 이미지 저장 디렉토리
    Path(settings.IMAGE_DIR).mkdir(parents=True, exist_ok=True)

    yield

# ─── FastAPI 애플리케이션 인스턴스 생성 ─────────────────────────────────────
app = FastAPI(
    title="SnapShare API",
    description="이미지 포스트 공유, 댓글, 추천/비추천 기능 제공",
    version="1.0.0",
    lifespan=lifespan,
)

# ─── 로그 설정 ─────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

# SQLAlchemy 엔진 로그는 DB_ECHO 설정으로만 제어
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

# ─── CORS 설정 ─────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ─── 예외 클래스 → Status Code 매핑 ───────────────────────────────────────
EXCEPTION_STATUS_MAP: dict[Type[Exception], int] = {
    BadRequestError: 400,
    UnauthorizedError: 401,
    NotFoundError: 404,
    ConflictError: 409,
    TransactionError: 500,
}


def resolve_status_code(exc: Exception) -> int:
    """
    예외의 MRO를 따라 EXCEPTION_STATUS_MAP에서 상태 코드를 찾음 (없으면 500)
    """
    for cls in type(exc).__mro__:
        if cls in EXCEPTION_STATUS_MAP:
            return EXCEPTION_STATUS_MAP[cls]
    return 500

@app.get("/health")
async def health_check() -> dict:
    """
    서비스 상태 확인용 엔드포인트
    """
    return {"status": "ok"}

@app.middleware("http")
async def ensure_utf8(request: Request, call_next):
    """
    모든 JSON 응답에 UTF-8 charset을 명시적으로 추가
    """
    resp = await call_next(request)
    if resp.media_type and resp.media_type.startswith("application/json"):
        ctype = resp.headers.get("Content-Type", "")
        if "charset" not in ctype.lower():
            resp.headers["Content-Type"] = "application/json; charset=utf-8"
    return resp

# ─── 예외 처리 핸들러 등록───────────────────────────────────────────────────
@app.exception_handler(ApiError)
async def handle_api_error(request: Request, exc: ApiError):
    """
    커스텀 ApiError를 일괄 처리
    EXCEPTION_STATUS_MAP에 매핑된 예외라면 해당 상태 코드로, 그렇지 않으면 500 Internal Server Error로 반환
    """
    status_code = resolve_status_code(exc)
    if status_code >= 500:
        logger.error("%s %s 처리 실패: %s", request.method, request.url.path, exc.message)
    return ORJSONResponse(status_code=status_code, content={"detail": exc.message})

@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    """
    요청 본문/파라미터 검증 실패를 400으로 반환
    """
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    return ORJSONResponse(
        status_code=400,
        content={"detail": "요청 값이 올바르지 않습니다.", "errors": errors},
    )

# ─── 라우터 등록 ───────────────────────────────────────────────────────
app.include_router(auth_router,    prefix="/api")
app.include_router(user_router,    prefix="/api")
app.include_router(post_router,    prefix="/api")
app.include_router(comment_router, prefix="/api")

# ─── 업로드 이미지 정적 파일 ───────────────────────────────────────────────
app.mount(
    settings.IMAGE_BASE_URL,
    StaticFiles(directory=settings.IMAGE_DIR, check_dir=False),
    name="images",
)

if __name__ == "__main__":
    uvicorn.run(
        "snapshare.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
