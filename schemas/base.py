# base.py
from datetime import datetime, timezone
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class APIModel(BaseModel):
    """JSON is camelCase on the wire; Python code uses snake_case."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalise client datetimes to the naive-UTC form stored in the database."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


# Aware datetimes from clients are stored as naive UTC
UTCDatetime = Annotated[datetime, AfterValidator(naive_utc)]

# Money columns hold up to 10 digits with 2 decimal places
MAX_AMOUNT = 100_000_000
