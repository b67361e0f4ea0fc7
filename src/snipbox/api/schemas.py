from __future__ import annotations

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

# --- Request bodies (form fields or JSON); unknown fields are dropped ---


class SnippetCreateForm(BaseModel):
    """POST /submit. ``snippet`` is accepted as an older name for ``code``."""

    model_config = ConfigDict(extra="ignore")

    language: str | None = None
    code: str | None = Field(None, validation_alias=AliasChoices("code", "snippet"))


class SnippetUpdateForm(BaseModel):
    """POST /edit and POST /save-edit."""

    model_config = ConfigDict(extra="ignore")

    filename: str | None = Field(None, validation_alias=AliasChoices("filename", "file"))
    language: str | None = None
    code: str | None = Field(None, validation_alias=AliasChoices("code", "snippet"))


class SnippetDeleteForm(BaseModel):
    model_config = ConfigDict(extra="ignore")

    file: str | None = Field(None, validation_alias=AliasChoices("file", "filename"))


class LoginForm(BaseModel):
    model_config = ConfigDict(extra="ignore")

    password: str | None = None


# --- Responses ---


class SnippetOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    filename: str
    language: str
    code: str
    timestamp: datetime


class SubmitResponse(BaseModel):
    success: bool = True
    message: str = "Snippet saved"
    filename: str | None = None


class DeleteResponse(BaseModel):
    success: bool = True
    filename: str


class CsrfResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    csrf_token: str = Field(serialization_alias="csrfToken")


class HealthResponse(BaseModel):
    status: str = "ok"


class ReadinessResponse(BaseModel):
    status: str = "ok"
    store: str = "up"
