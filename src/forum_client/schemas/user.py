# src/forum_client/schemas/user.py
"""Schemas for the anonymous voter and the sign-up form."""

from pydantic import BaseModel, Field, model_validator


class IdentityResponse(BaseModel):
    """The identifier votes are currently recorded under."""

    voter_identifier: str


class SignUpRequest(BaseModel):
    """Sign-up form. Only checks that the two passwords match."""

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    confirm_password: str

    @model_validator(mode="after")
    def _passwords_match(self) -> "SignUpRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self
