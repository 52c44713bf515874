"""Persist forms with their fields and resource attachments.

A form row owns its field rows (replaced wholesale on update) and a set of
attachment rows linking it to global resources. Attachment rows carry the
position the resource was attached at, which fixes the order resources are
injected into the prompt.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from promptforms.store.db import execute, transaction, Transaction

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER = "gemini"


def _write_children(
    tx: Transaction,
    form_id: int,
    fields: list[dict],
    resource_ids: list[int],
) -> None:
    """Insert field rows and attachment rows for a form."""
    for index, field in enumerate(fields):
        tx.execute(
            """INSERT INTO fields
               (form_id, name, label, type, placeholder, required, order_index)
               VALUES (%s, %s, %s, %s, %s, %s, %s)""",
            (
                form_id,
                field["name"],
                field.get("label") or "",
                field.get("type") or "text",
                field.get("placeholder") or "",
                bool(field.get("required")),
                index,
            ),
        )

    position = 0
    seen: set[int] = set()
    for resource_id in resource_ids:
        if resource_id in seen:
            continue
        seen.add(resource_id)
        if tx.fetch_one("SELECT id FROM resources WHERE id = %s", (resource_id,)) is None:
            logger.warning(f"Form {form_id}: skipping unknown resource {resource_id}")
            continue
        tx.execute(
            "INSERT INTO form_resources (form_id, resource_id, position) VALUES (%s, %s, %s)",
            (form_id, resource_id, position),
        )
        position += 1


def create_form(
    title: str,
    *,
    description: str = "",
    prompt_template: str = "",
    provider: str = DEFAULT_PROVIDER,
    model: str = "",
    fields: Optional[list[dict]] = None,
    resource_ids: Optional[list[int]] = None,
) -> int:
    """Create a form with its fields and attachments. Returns the form id."""
    now = datetime.now(timezone.utc).isoformat()
    with transaction() as tx:
        form_id = tx.insert(
            """INSERT INTO forms
               (title, description, prompt_template, provider, model, created_at)
               VALUES (%s, %s, %s, %s, %s, %s)""",
            (
                title,
                description or "",
                prompt_template or "",
                provider or DEFAULT_PROVIDER,
                model or "",
                now,
            ),
        )
        _write_children(tx, form_id, fields or [], resource_ids or [])

    logger.info(
        f"Created form {form_id}: '{title}', provider={provider or DEFAULT_PROVIDER}, "
        f"{len(fields or [])} fields, {len(resource_ids or [])} resources"
    )
    return form_id


def update_form(
    form_id: int,
    title: str,
    *,
    description: str = "",
    prompt_template: str = "",
    provider: str = DEFAULT_PROVIDER,
    model: str = "",
    fields: Optional[list[dict]] = None,
    resource_ids: Optional[list[int]] = None,
) -> bool:
    """Update a form and replace its fields and attachments.

    Returns False if the form does not exist.
    """
    with transaction() as tx:
        if tx.fetch_one("SELECT id FROM forms WHERE id = %s", (form_id,)) is None:
            return False
        tx.execute(
            """UPDATE forms
               SET title = %s, description = %s, prompt_template = %s,
                   provider = %s, model = %s
               WHERE id = %s""",
            (
                title,
                description or "",
                prompt_template or "",
                provider or DEFAULT_PROVIDER,
                model or "",
                form_id,
            ),
        )
        tx.execute("DELETE FROM fields WHERE form_id = %s", (form_id,))
        tx.execute("DELETE FROM form_resources WHERE form_id = %s", (form_id,))
        _write_children(tx, form_id, fields or [], resource_ids or [])

    logger.info(f"Updated form {form_id}: '{title}'")
    return True


def delete_form(form_id: int) -> bool:
    """Delete a form with its fields and attachments. Returns True if it existed."""
    with transaction() as tx:
        if tx.fetch_one("SELECT id FROM forms WHERE id = %s", (form_id,)) is None:
            return False
        tx.execute("DELETE FROM fields WHERE form_id = %s", (form_id,))
        tx.execute("DELETE FROM form_resources WHERE form_id = %s", (form_id,))
        tx.execute("DELETE FROM forms WHERE id = %s", (form_id,))
    logger.info(f"Deleted form {form_id}")
    return True


def list_forms() -> list[dict]:
    """List all forms (without fields or resources), newest first."""
    return execute(
        "SELECT * FROM forms ORDER BY created_at DESC, id DESC",
        fetch="all",
    )


def get_form(form_id: int) -> Optional[dict]:
    """Retrieve a single form row."""
    return execute(
        "SELECT * FROM forms WHERE id = %s",
        (form_id,),
        fetch="one",
    )


def get_fields(form_id: int) -> list[dict]:
    """Fields of a form in display order."""
    return execute(
        "SELECT * FROM fields WHERE form_id = %s ORDER BY order_index ASC, id ASC",
        (form_id,),
        fetch="all",
    )


def get_attached_resources(form_id: int) -> list[dict]:
    """Full resource rows attached to a form, in attachment order."""
    return execute(
        """SELECT r.* FROM resources r
           JOIN form_resources fr ON r.id = fr.resource_id
           WHERE fr.form_id = %s
           ORDER BY fr.position ASC, r.id ASC""",
        (form_id,),
        fetch="all",
    )


def get_resources_for_form(form_id: int) -> list[dict]:
    """Name and content of each attached resource, in attachment order."""
    return execute(
        """SELECT r.name, r.content FROM resources r
           JOIN form_resources fr ON r.id = fr.resource_id
           WHERE fr.form_id = %s
           ORDER BY fr.position ASC, r.id ASC""",
        (form_id,),
        fetch="all",
    )


def get_form_detail(form_id: int) -> Optional[dict]:
    """A form with its fields and attached resources, or None."""
    form = get_form(form_id)
    if form is None:
        return None
    return {
        **form,
        "fields": get_fields(form_id),
        "resources": get_attached_resources(form_id),
    }
