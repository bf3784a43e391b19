class ApiError(Exception):
    """
    기본 API 예외의 최상위 클래스
    - 모든 커스텀 API 예외가 이 클래스를 상속
    - main.py의 예외 핸들러에서 상태 코드로 변환됨
    """
    def __init__(self, message: str):
        """
        - message: 사용자에게 전달할 예외 메시지 문자열
        """
        self.message = message
        super().__init__(message)


class BadRequestError(ApiError):
    """400 Bad Request (입력 검증 실패)"""
    pass


class UnauthorizedError(ApiError):
    """401 Unauthorized (세션 없음 / 소유권 불일치)"""
    pass


class NotFoundError(ApiError):
    """404 Not Found"""
    pass


class ConflictError(ApiError):
    """409 Conflict (이메일 중복 등)"""
    pass


class TransactionError(ApiError):
    """
    500 Internal Server Error
    - 여러 단계로 이루어진 트랜잭션 도중 실패하여 전체 롤백된 경우
    """
    pass
