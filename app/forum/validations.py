"""
Request-body schemas for the forum's forms.

Models are declarative; the `validate_*_payload` helpers flatten pydantic's
errors into display strings for form handlers to flash.
"""
from __future__ import annotations

from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, HttpUrl, ValidationError
from pydantic_core import PydanticCustomError


def _min_chars(limit: int) -> AfterValidator:
    def check(value: str) -> str:
        if len(value) < limit:
            raise PydanticCustomError("too_short", "Minimum {limit} Characters", {"limit": limit})
        return value

    return AfterValidator(check)


def _max_chars(limit: int) -> AfterValidator:
    def check(value: str) -> str:
        if len(value) > limit:
            raise PydanticCustomError("too_long", "Maximum {limit} characters", {"limit": limit})
        return value

    return AfterValidator(check)


class ThreadValidation(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    thread: Annotated[str, _min_chars(3)]
    account_id: str = Field(alias="accountId")


class CommentValidation(BaseModel):
    thread: Annotated[str, _min_chars(3)]


class UserValidation(BaseModel):
    profile_photo: HttpUrl
    name: Annotated[str, _min_chars(3), _max_chars(30)]
    username: Annotated[str, _min_chars(3), _max_chars(30)]
    bio: Annotated[str, _min_chars(3), _max_chars(1000)]


def _error_messages(exc: ValidationError) -> list[str]:
    messages = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ())) or "payload"
        messages.append(f"{field}: {err['msg']}")
    return messages


def _validate(model: type[BaseModel], payload: dict[str, Any]) -> list[str]:
    try:
        model.model_validate(payload)
    except ValidationError as e:
        return _error_messages(e)
    return []


def validate_thread_payload(payload: dict[str, Any]) -> list[str]:
    """Validate thread creation payload. Returns list of errors."""
    return _validate(ThreadValidation, payload)


def validate_comment_payload(payload: dict[str, Any]) -> list[str]:
    """Validate comment creation payload. Returns list of errors."""
    return _validate(CommentValidation, payload)


def validate_user_payload(payload: dict[str, Any]) -> list[str]:
    """Validate onboarding/profile payload. Returns list of errors."""
    return _validate(UserValidation, payload)
