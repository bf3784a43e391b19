"""
Repository 계층 예외 클래스들
"""

from snapshare.utils.exceptions import TransactionError


class RepositoryError(TransactionError):
    """Repository 관련 기본 예외 (500)"""
    pass


class DatabaseCommitError(RepositoryError):
    """DB 커밋 관련 예외 (롤백 완료 후 발생)"""
    pass


class QueryExecutionError(RepositoryError):
    """트랜잭션 도중 쿼리 실행 실패 예외"""
    pass
