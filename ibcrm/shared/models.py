"""Base models and common types used across modules."""

from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """Base schema for API payloads.

    Fields are exposed in camelCase on the wire; snake_case input is
    accepted as well.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


# Common enums


class UserRole(str, Enum):
    """Account roles."""

    USER = "user"
    ADMIN = "admin"


class UserStatus(str, Enum):
    """Account status. Only active accounts may authenticate."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"
