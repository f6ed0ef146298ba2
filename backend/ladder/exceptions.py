from pydantic import BaseModel
from typing import Optional, TypeVar

from .services.results import InvalidInput, NotFound, Ok, Result

T = TypeVar("T")


class ProblemDetail(BaseModel):
    """RFC 7807 compliant error response."""

    type: str = "about:blank"
    title: str
    detail: Optional[str] = None
    status: int
    instance: Optional[str] = None
    code: str


class DomainException(Exception):
    """Base class for domain-specific exceptions."""

    def __init__(
        self,
        status_code: int,
        title: str,
        *,
        code: str,
        detail: str | None = None,
        type_: str = "about:blank",
    ) -> None:
        self.status_code = status_code
        self.title = title
        self.detail = detail
        self.type = type_
        self.code = code


class EntityNotFound(DomainException):
    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(
            status_code=404,
            title=f"{entity.capitalize()} not found",
            detail=f"{entity} '{entity_id}' not found",
            code=f"{entity}_not_found",
        )


class InvalidRequest(DomainException):
    def __init__(self, detail: str, *, code: str) -> None:
        super().__init__(
            status_code=400,
            title="Invalid input",
            detail=detail,
            code=code,
        )


def unwrap(result: Result[T], *, invalid_code: str) -> T:
    """Return the value of an ``Ok`` result or raise the matching problem."""

    if isinstance(result, Ok):
        return result.value
    if isinstance(result, NotFound):
        raise EntityNotFound(result.entity, result.entity_id)
    if isinstance(result, InvalidInput):
        raise InvalidRequest(result.detail, code=invalid_code)
    raise TypeError(f"unexpected result: {result!r}")
