from datetime import datetime, timezone

from pydantic import AliasGenerator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utc_now() -> datetime:
    # Naive UTC, the way SQLite hands datetimes back
    return datetime.now(timezone.utc).replace(tzinfo=None)


class CamelDTO(BaseModel):
    """
    Base for DTOs that leave the service through the HTTP envelope.

    Fields are snake_case in Python and serialized as camelCase
    (model_dump(by_alias=True)), matching the public JSON contract.
    """
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=AliasGenerator(serialization_alias=to_camel),
    )
