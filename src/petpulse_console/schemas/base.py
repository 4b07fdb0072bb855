"""
Shared Pydantic building blocks for backend records.

The backend speaks camelCase JSON and identifies documents by ``_id``; the
schemas here expose snake_case attributes, accept either spelling on input and
serialize back to camelCase for request bodies.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Annotated, Any, List, Optional, Type, TypeVar

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    ValidationError,
    field_validator,
)
from pydantic.alias_generators import to_camel

from ..exceptions import SchemaValidationException, format_validation_errors
from ..utils.datetime_utils import parse_date

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=BaseModel)

# Money is kept as Decimal but written to JSON bodies as a plain number
Money = Annotated[
    Decimal, PlainSerializer(lambda v: float(v), return_type=float, when_used="json")
]


class ConsoleSchema(BaseModel):
    """Base for request bodies: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        validate_assignment=True,
        str_strip_whitespace=True,
    )

    def to_payload(self) -> dict:
        """JSON-ready camelCase body, omitting unset optional fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ConsoleRecord(ConsoleSchema):
    """
    Base for records read from the backend.

    Unknown keys are ignored and numeric ids are coerced to strings. ``id``
    prefers ``id`` and falls back to Mongo's ``_id``.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        extra="ignore",
        coerce_numbers_to_str=True,
        str_strip_whitespace=True,
    )

    id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("id", "_id"),
        description="Backend identifier",
    )


def lenient_date(value: Any) -> Optional[date]:
    """Field validator body turning any backend date spelling into a date."""
    if value is None or value == "":
        return None
    parsed = parse_date(value)
    if parsed is None:
        raise ValueError(f"Invalid date: {value!r}")
    return parsed


def lenient_money(value: Any) -> Any:
    """Blank or null amounts become zero; everything else is left to Pydantic."""
    if value is None or value == "":
        return Decimal("0")
    return value


class Extra(ConsoleRecord):
    """A priced add-on attached to an appointment or cart line."""

    name: str = Field("Extra", description="Add-on name")
    price: Money = Field(Decimal("0"), description="Add-on price")

    @field_validator("price", mode="before")
    @classmethod
    def validate_price(cls, v: Any) -> Any:
        """Treat missing or non-numeric add-on prices as zero."""
        v = lenient_money(v)
        try:
            Decimal(str(v))
        except ArithmeticError:
            return Decimal("0")
        return v

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, v: Any) -> Any:
        return v or "Extra"


def parse_records(schema: Type[R], payload: Any) -> List[R]:
    """
    Validate a list payload record by record.

    Records that fail validation are logged and skipped so one malformed
    document does not blank the whole table.

    Raises:
        SchemaValidationException: If ``payload`` is not a list
    """
    if not isinstance(payload, list):
        raise SchemaValidationException(
            f"Expected a list of {schema.__name__} records",
            schema_name=schema.__name__,
        )

    records: List[R] = []
    for index, item in enumerate(payload):
        try:
            records.append(schema.model_validate(item))
        except ValidationError as e:
            logger.warning(
                f"Skipping invalid {schema.__name__} record at index {index}",
                extra={"validation_errors": format_validation_errors(e.errors())},
            )
    return records


def parse_record(schema: Type[R], payload: Any) -> R:
    """
    Validate a single record.

    Raises:
        SchemaValidationException: If the payload does not match ``schema``
    """
    try:
        return schema.model_validate(payload)
    except ValidationError as e:
        raise SchemaValidationException(
            f"Invalid {schema.__name__} payload",
            schema_name=schema.__name__,
            validation_errors=format_validation_errors(e.errors()),
        )
