"""Response envelope returned by the resource layer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Sequence


class ResponseMessage(Enum):
    """Response codes with their message template and argument count."""

    SUCCESS = (1000, "Success", 0)
    ENTITY_NOT_FOUND = (1101, "Entity not found: %s", 1)
    BAD_REQUEST = (1103, "Bad request: %s", 1)
    ENTITY_ALREADY_EXISTS = (1104, "Entity already exists: %s", 1)
    ENTITY_REFERENCED = (1105, "Entity is still referenced: %s", 1)

    def __init__(self, code: int, template: str, nargs: int) -> None:
        self.code = code
        self.template = template
        self.nargs = nargs

    def format(self, *args: str) -> str:
        if len(args) != self.nargs:
            raise ValueError(
                f"{self.name} expects {self.nargs} argument(s), got {len(args)}"
            )
        return self.template % args if args else self.template


@dataclass(frozen=True)
class CatalogResponse:
    """Wrapper passing entities and status back to the caller.

    ``entity`` is used for single results and ``entities`` for collections;
    unset parts are omitted from :meth:`to_dict`.
    """

    response_code: int
    response_message: str
    entity: Optional[Any] = None
    entities: Optional[Sequence[Any]] = None

    @classmethod
    def success(cls, *, entity: Any = None, entities: Optional[Sequence[Any]] = None) -> "CatalogResponse":
        return cls(
            response_code=ResponseMessage.SUCCESS.code,
            response_message=ResponseMessage.SUCCESS.format(),
            entity=entity,
            entities=entities,
        )

    @classmethod
    def failure(cls, message: ResponseMessage, *args: str) -> "CatalogResponse":
        return cls(response_code=message.code, response_message=message.format(*args))

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "responseCode": self.response_code,
            "responseMessage": self.response_message,
        }
        if self.entity is not None:
            body["entity"] = _encode(self.entity)
        if self.entities is not None:
            body["entities"] = [_encode(e) for e in self.entities]
        return body


def _encode(value: Any) -> Any:
    to_dict = getattr(value, "to_dict", None)
    return to_dict() if callable(to_dict) else value
