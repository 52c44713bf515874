"""API routes for forms and form execution.

Endpoints:
    GET    /api/forms                  List forms
    GET    /api/forms/{id}             Form with fields and attached resources
    POST   /api/forms                  Create form (fields + resource_ids)
    PUT    /api/forms/{id}             Update form, replacing fields and attachments
    DELETE /api/forms/{id}             Delete form
    POST   /api/forms/{id}/execute     Compose the prompt and generate text
"""

import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse

from promptforms.forms.executor import FormExecutor
from promptforms.forms.schemas import (
    ExecuteRequest,
    ExecuteResponse,
    FormCreated,
    FormDetail,
    FormRecord,
    FormWrite,
)
from promptforms.llm.errors import (
    BackendError,
    FormNotFoundError,
    InvalidProviderError,
    MissingCredentialError,
)
from promptforms.store import form_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/forms", tags=["forms"])

ERROR_STATUS = {
    FormNotFoundError.kind: 404,
    MissingCredentialError.kind: 400,
    InvalidProviderError.kind: 400,
    BackendError.kind: 500,
}


def _require_title(body: FormWrite) -> None:
    if not body.title.strip():
        raise HTTPException(status_code=400, detail="Title is required")


def _write_kwargs(body: FormWrite) -> dict:
    return {
        "description": body.description,
        "prompt_template": body.prompt_template,
        "provider": body.provider,
        "model": body.model,
        "fields": [f.model_dump(mode="json") for f in body.fields],
        "resource_ids": body.resource_ids,
    }


# --- CRUD ---


@router.get("", response_model=list[FormRecord])
async def list_all_forms():
    """List all forms, newest first."""
    return form_store.list_forms()


@router.get("/{form_id}", response_model=FormDetail)
async def get_form_by_id(form_id: int):
    """Get a form with its ordered fields and attached resources."""
    form = form_store.get_form_detail(form_id)
    if form is None:
        raise HTTPException(status_code=404, detail="Form not found")
    return form


@router.post("", response_model=FormCreated, status_code=201)
async def create_form(body: FormWrite):
    """Create a new form."""
    _require_title(body)
    form_id = form_store.create_form(body.title, **_write_kwargs(body))
    return FormCreated(id=form_id)


@router.put("/{form_id}")
async def update_form(form_id: int, body: FormWrite):
    """Update a form. Fields and resource attachments are replaced."""
    _require_title(body)
    success = form_store.update_form(form_id, body.title, **_write_kwargs(body))
    if not success:
        raise HTTPException(status_code=404, detail="Form not found")
    return {"id": form_id, "message": "Form updated successfully"}


@router.delete("/{form_id}")
async def delete_form(form_id: int):
    """Delete a form with its fields and attachments."""
    success = form_store.delete_form(form_id)
    if not success:
        raise HTTPException(status_code=404, detail="Form not found")
    return {"id": form_id, "deleted": True, "message": "Form deleted successfully"}


# --- Execution ---


@router.post("/{form_id}/execute", response_model=ExecuteResponse)
async def execute_form(form_id: int, body: ExecuteRequest, request: Request):
    """Generate text for a form.

    Provider and model come from the stored form; the request supplies only
    the field values and, optionally, the API key (config.apiKey).
    """
    executor: FormExecutor = request.app.state.executor
    credential = body.config.apiKey if body.config else None

    result = await executor.execute(form_id, body.inputs, credential)
    if not result.ok:
        return JSONResponse(
            status_code=ERROR_STATUS.get(result.error_kind, 500),
            content={"detail": result.message, "error_kind": result.error_kind},
        )
    return ExecuteResponse(result=result.text or "")
