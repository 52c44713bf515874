"""Store and retrieve reference resources.

Resources are global text documents that forms attach by id. Their full
content is appended to the composed prompt at execution time.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from promptforms.store.db import execute, transaction

logger = logging.getLogger(__name__)


def create_resource(name: str, content: str, *, type: str = "text") -> int:
    """Store a resource. Returns the new resource id."""
    now = datetime.now(timezone.utc).isoformat()
    with transaction() as tx:
        resource_id = tx.insert(
            """INSERT INTO resources (name, type, content, created_at)
               VALUES (%s, %s, %s, %s)""",
            (name, type, content, now),
        )

    logger.info(f"Stored resource {resource_id}: '{name}', {len(content):,} chars, type={type}")
    return resource_id


def get_resource(resource_id: int) -> Optional[dict]:
    """Retrieve a resource by id, including content."""
    return execute(
        "SELECT * FROM resources WHERE id = %s",
        (resource_id,),
        fetch="one",
    )


def list_resources() -> list[dict]:
    """List all resources, newest first."""
    return execute(
        "SELECT * FROM resources ORDER BY created_at DESC, id DESC",
        fetch="all",
    )


def delete_resource(resource_id: int) -> bool:
    """Delete a resource and its attachments. Returns True if it existed."""
    with transaction() as tx:
        if tx.fetch_one("SELECT id FROM resources WHERE id = %s", (resource_id,)) is None:
            return False
        tx.execute("DELETE FROM form_resources WHERE resource_id = %s", (resource_id,))
        tx.execute("DELETE FROM resources WHERE id = %s", (resource_id,))
    logger.info(f"Deleted resource {resource_id}")
    return True
