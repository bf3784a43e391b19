import enum


class VoteType(str, enum.Enum):
    """
    투표 방향
    - 투표 행이 없으면 '투표하지 않음'을 의미하므로 별도의 none 값은 두지 않음
    """
    UP = "up"
    DOWN = "down"
