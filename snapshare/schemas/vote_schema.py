from pydantic import BaseModel, Field

# ─── 투표 관련 요청/응답 스키마 정의 ─────────────────────────────────────

class VoteRequest(BaseModel):
    """
    투표 요청 모델
    - vote: 'up' 또는 'down'
    - 같은 방향으로 다시 투표하면 취소, 반대 방향이면 전환
    """
    vote: str = Field(
        ..., description="투표 방향 ('up' | 'down')"
    )

    model_config = {
        "json_schema_extra": {
            "example": {"vote": "up"}
        }
    }


class VoteResponse(BaseModel):
    """
    투표 적용 후 대상의 최신 집계
    """
    upvotes: int = Field(
        ..., description="추천 수"
    )
    downvotes: int = Field(
        ..., description="비추천 수"
    )
