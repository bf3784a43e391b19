import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from snapshare.core.database import get_db_session
from snapshare.dependencies import get_current_user, get_image_storage
from snapshare.models.user import User
from snapshare.schemas.user_schema import UserProfileResponse, UserUpdateResponse
from snapshare.services.storage_service import ImageStorage
from snapshare.services.user_service import UserService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/users", tags=["User"])

@router.post(
    "/me",
    response_model=UserUpdateResponse,
    summary="내 프로필 수정",
)
async def update_my_profile(
    first_name: Optional[str] = Form(None),
    last_name: Optional[str] = Form(None),
    remove_image: bool = Form(False),
    image: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    storage: ImageStorage = Depends(get_image_storage),
) -> UserUpdateResponse:
    """
    프로필(이름, 성, 프로필 이미지) 수정
    - 모든 값이 현재와 같으면 저장하지 않고 changed=False 반환
    """
    user, changed = await UserService(db, storage).update_user(
        current_user.id,
        first_name=first_name,
        last_name=last_name,
        image=image,
        remove_image=remove_image,
    )
    return UserUpdateResponse(
        message="프로필이 수정되었습니다." if changed else "변경 사항이 없습니다.",
        changed=changed,
        user=UserProfileResponse.model_validate(user),
    )

@router.get(
    "/{user_id}",
    response_model=UserProfileResponse,
    summary="사용자 프로필 조회",
)
async def get_user_profile(
    user_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> UserProfileResponse:
    user = await UserService(db).get_user(user_id)
    return UserProfileResponse.model_validate(user)
