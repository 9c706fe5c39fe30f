from libs.result import Error
from src.domain.errors import DomainError


def error_from(exc: DomainError) -> Error:
    """Translate a domain rule violation into a use-case Error with the same code"""
    return Error(
        code=exc.code,
        message=exc.message,
        reason=exc.category.value,
        details=dict(exc.details),
    )
