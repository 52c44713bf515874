"""Form execution entry point.

One execution is a read-compose-dispatch sequence:
1. Load the form and its attached resources from the store (one snapshot)
2. Compose the prompt from template, resources and submitted values
3. Dispatch to the form's provider with the caller's credential

Nothing is written back to the store.
"""

import logging
from types import ModuleType
from typing import Any, Mapping, Optional, Protocol, Union

from promptforms.forms.compositor import compose_prompt
from promptforms.forms.schemas import ExecutionResult
from promptforms.llm.dispatcher import ProviderDispatcher
from promptforms.llm.errors import ExecutionError, FormNotFoundError
from promptforms.store import form_store

logger = logging.getLogger(__name__)


class FormSource(Protocol):
    """Read interface the executor needs from the store."""

    def get_form(self, form_id: int) -> Optional[dict]: ...

    def get_resources_for_form(self, form_id: int) -> list[dict]: ...


class FormExecutor:
    """Executes stored forms against their configured provider."""

    def __init__(
        self,
        dispatcher: ProviderDispatcher,
        store: Union[FormSource, ModuleType] = form_store,
    ):
        self._dispatcher = dispatcher
        self._store = store

    def build_prompt(self, form_id: int, inputs: Mapping[str, Any]) -> tuple[dict, str]:
        """Load a form and compose its prompt.

        Returns:
            (form row, composed prompt)

        Raises:
            FormNotFoundError: If the form does not exist
        """
        form = self._store.get_form(form_id)
        if form is None:
            raise FormNotFoundError(f"Form not found: {form_id}")

        resources = self._store.get_resources_for_form(form_id)
        prompt = compose_prompt(form.get("prompt_template") or "", resources, inputs)
        return form, prompt

    async def run(
        self,
        form_id: int,
        inputs: Mapping[str, Any],
        credential: Optional[str] = None,
    ) -> str:
        """Execute a form and return the generated text.

        Raises:
            ExecutionError: Any subclass, see promptforms.llm.errors
        """
        form, prompt = self.build_prompt(form_id, inputs)
        logger.info(
            f"Executing form {form_id}: provider={form.get('provider')}, "
            f"{len(inputs)} inputs, prompt={len(prompt):,} chars"
        )
        return await self._dispatcher.dispatch(
            form.get("provider"),
            form.get("model"),
            prompt,
            credential,
        )

    async def execute(
        self,
        form_id: int,
        inputs: Mapping[str, Any],
        credential: Optional[str] = None,
    ) -> ExecutionResult:
        """Execute a form, returning either text or an error kind and message."""
        try:
            text = await self.run(form_id, inputs, credential)
        except ExecutionError as e:
            logger.warning(f"Form {form_id} execution failed: {e.kind}: {e.message}")
            return ExecutionResult(error_kind=e.kind, message=e.message)
        return ExecutionResult(text=text)
