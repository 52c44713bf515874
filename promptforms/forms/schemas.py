"""Form, field and resource schemas.

Request bodies accepted by the CRUD routes and the records they return.
Records mirror the database rows; the execution request/result pair is
ephemeral and never persisted.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class FieldType(str, Enum):
    """Input widget types a form field can use."""
    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"


class ResourceType(str, Enum):
    """Resource kinds. Only free text is used for prompt composition."""
    TEXT = "text"
    URL = "url"


# --- Fields ---


class FormFieldInput(BaseModel):
    """A field as submitted by the form builder."""

    name: str = Field(description="Placeholder key used as {{name}} in the template")
    label: str = ""
    type: FieldType = FieldType.TEXT
    placeholder: str = ""
    required: bool = False


class FormFieldRecord(FormFieldInput):
    """A stored field. order_index defines display and iteration order."""

    id: int
    form_id: int
    order_index: int = 0


# --- Resources ---


class ResourceCreate(BaseModel):
    """Request body for creating a resource."""

    name: str = ""
    type: ResourceType = ResourceType.TEXT
    content: str = ""


class ResourceRecord(BaseModel):
    """A stored resource."""

    id: int
    name: str
    type: str = ResourceType.TEXT.value
    content: str
    created_at: Optional[datetime] = None


# --- Forms ---


class FormWrite(BaseModel):
    """Request body for creating or updating a form.

    Fields and resource attachments are replaced wholesale on update.
    An empty model means "use the provider's default model".
    """

    title: str = ""
    description: str = ""
    prompt_template: str = ""
    provider: str = "gemini"
    model: str = ""
    fields: list[FormFieldInput] = Field(default_factory=list)
    resource_ids: list[int] = Field(default_factory=list)


class FormRecord(BaseModel):
    """A stored form without its fields or resources."""

    id: int
    title: str
    description: str = ""
    prompt_template: str = ""
    provider: str = "gemini"
    model: str = ""
    created_at: Optional[datetime] = None


class FormDetail(FormRecord):
    """A form with its ordered fields and attached resources."""

    fields: list[FormFieldRecord] = Field(default_factory=list)
    resources: list[ResourceRecord] = Field(default_factory=list)


class FormCreated(BaseModel):
    id: int
    message: str = "Form created successfully"


# --- Execution ---


class ExecuteConfig(BaseModel):
    """Caller-side execution config. Only the credential is honoured;
    provider and model always come from the stored form."""

    apiKey: Optional[str] = None


class ExecuteRequest(BaseModel):
    """Request body for POST /forms/{id}/execute."""

    inputs: dict[str, Any] = Field(
        default_factory=dict,
        description="Field name -> submitted value",
    )
    config: Optional[ExecuteConfig] = None


class ExecuteResponse(BaseModel):
    result: str


class ExecutionResult(BaseModel):
    """Outcome of a single form execution: either text or an error."""

    text: Optional[str] = None
    error_kind: Optional[str] = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error_kind is None
