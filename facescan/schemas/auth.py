"""
Auth request bodies.

Older clients send PascalCase field names (`Email`, `UserName`, ...), newer
ones camelCase. Both spellings are folded into one attribute here so the
service layer never sees the difference. Every field is optional at this
level: presence is checked by the service, which reports missing fields with
the same 400 response as any other validation failure.
"""
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, Field, model_validator


class _DualCasingPayload(BaseModel):
    @model_validator(mode="before")
    @classmethod
    def _drop_blank_keys(cls, data: Any) -> Any:
        # A blank spelling must not shadow a filled one: {"Email": "", "email": "a@x.com"}.
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None and value != ""}
        return data


class RegisterPayload(_DualCasingPayload):
    email: Optional[str] = Field(default=None, validation_alias=AliasChoices("Email", "email"))
    user_name: Optional[str] = Field(default=None, validation_alias=AliasChoices("UserName", "userName"))
    password: Optional[str] = Field(default=None, validation_alias=AliasChoices("Password", "password"))


class LoginPayload(_DualCasingPayload):
    login_user_name: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("LoginUserName", "loginUserName")
    )
    login_password: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("LoginPassword", "loginPassword")
    )


class EmailPayload(_DualCasingPayload):
    email: Optional[str] = Field(default=None, validation_alias=AliasChoices("Email", "email"))


class ResetPasswordPayload(_DualCasingPayload):
    token: Optional[str] = Field(default=None, validation_alias=AliasChoices("token", "Token"))
    password: Optional[str] = Field(default=None, validation_alias=AliasChoices("password", "Password"))
