"""
HTTP mapping for domain errors.

Domain errors carry a category; the API translates categories to status codes
and error codes to the ``error`` field of the envelope.
"""

from typing import Dict

from ..domain.enums.circuit import ErrorCategory
from ..domain.errors import DomainError

CATEGORY_STATUS: Dict[ErrorCategory, int] = {
    ErrorCategory.VALIDATION: 422,
    ErrorCategory.NOT_FOUND: 404,
    ErrorCategory.PRECONDITION: 409,
    ErrorCategory.CONFLICT: 409,
    ErrorCategory.FATAL: 500,
}


def http_status_for(error: DomainError) -> int:
    return CATEGORY_STATUS.get(error.category, 400)


def error_code_for(error: DomainError) -> str:
    return error.error_code or error.category.value.upper()
