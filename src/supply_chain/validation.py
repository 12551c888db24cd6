"""Structural validation of inbound payloads.

Every mutating operation validates its payload here before touching a store,
so a rejected payload never leaves partial state behind.
"""

import logging
from typing import (
    Any,
    Mapping,
    Type,
    TypeVar,
    Union,
)

from pydantic import (
    BaseModel,
    ValidationError,
)

from .errors import InvalidPayload


logger = logging.getLogger(__name__)

PayloadT = TypeVar("PayloadT", bound=BaseModel)


def format_validation_error(error: ValidationError) -> str:
    """Flatten a pydantic ValidationError into a single readable message."""
    parts = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail["loc"]) or "payload"
        parts.append(f"{location}: {detail['msg']}")
    return "; ".join(parts)


def validate_payload(model: Type[PayloadT], payload: Union[PayloadT, Mapping[str, Any]]) -> PayloadT:
    """Validate a payload against its model.

    Model instances are re-validated from their dumped fields, because
    ``model_construct`` and assignment can bypass the field constraints.

    Args:
        model: Payload model class (ClientPayload, SupplierPayload, OrderPayload, ...)
        payload: Model instance or plain mapping

    Returns:
        A freshly validated model instance

    Raises:
        InvalidPayload: If any field violates its constraints
    """
    data = payload.model_dump() if isinstance(payload, BaseModel) else payload
    try:
        return model.model_validate(data)
    except ValidationError as e:
        msg = f"invalid {model.__name__}: {format_validation_error(e)}"
        logger.warning("Rejected payload: %s", msg)
        raise InvalidPayload(msg) from e
