from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Annotated, Any, Dict, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, PlainSerializer, ValidationError
from pydantic.alias_generators import to_camel

from invoice_desk.errors import ValidationFailed
from invoice_desk.utils.money import to_number


def _money_json(d: Decimal):
    return int(d) if d == d.to_integral_value() else float(d)


# server decimals come back as strings, sent back as JSON numbers
Money = Annotated[
    Decimal,
    BeforeValidator(to_number),
    PlainSerializer(_money_json, return_type=Any, when_used="json"),
]


class ApiModel(BaseModel):
    """Server records: camelCase on the wire, tolerant of unknown keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class TimeStamped(ApiModel):
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


def parse_number(v: Any, message: str = "Must be a number") -> Decimal:
    """Strict counterpart of to_number for user input: garbage is an error."""
    if isinstance(v, bool) or v is None:
        raise ValueError(message)
    if isinstance(v, str):
        v = v.strip()
    try:
        n = Decimal(str(v))
    except InvalidOperation:
        raise ValueError(message)
    if not n.is_finite():
        raise ValueError(message)
    return n


M = TypeVar("M", bound=BaseModel)


def parse_input(model: Type[M], data: Union[M, Mapping[str, Any]]) -> M:
    """User input -> draft model; pydantic errors become ValidationFailed."""
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ValidationFailed.from_pydantic(e) from e
