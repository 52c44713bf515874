"""
Tests for the form execution entry point (read, compose, dispatch).
"""

import pytest

from promptforms.forms.executor import FormExecutor
from promptforms.llm.dispatcher import Provider, ProviderDispatcher
from promptforms.store import form_store, resource_store


class InMemoryForms:
    """FormSource backed by dicts, counting reads."""

    def __init__(self, forms, resources=None):
        self.forms = forms
        self.resources = resources or {}
        self.reads = []

    def get_form(self, form_id):
        self.reads.append(("form", form_id))
        return self.forms.get(form_id)

    def get_resources_for_form(self, form_id):
        self.reads.append(("resources", form_id))
        return self.resources.get(form_id, [])


@pytest.fixture
def gemini_settings(settings):
    settings.gemini_api_key = "env-key"
    return settings


class TestExecute:

    @pytest.mark.asyncio
    async def test_summarize_end_to_end(self, gemini_settings, make_backend):
        gemini = make_backend(text="A greeting.")
        store = InMemoryForms({
            1: {"id": 1, "prompt_template": "Summarize: {{doc}}", "provider": "gemini", "model": ""},
        })
        executor = FormExecutor(
            ProviderDispatcher(gemini_settings, backends={Provider.GEMINI: gemini}),
            store=store,
        )

        result = await executor.execute(1, {"doc": "hello world"})

        assert result.ok
        assert result.text == "A greeting."
        assert gemini.calls == [
            {"model": "gemini-2.5-flash", "prompt": "Summarize: hello world", "credential": "env-key"}
        ]

    @pytest.mark.asyncio
    async def test_form_not_found(self, dispatcher, fake_backends):
        executor = FormExecutor(dispatcher, store=InMemoryForms({}))

        result = await executor.execute(42, {})

        assert not result.ok
        assert result.error_kind == "form_not_found"
        assert not any(b.calls for b in fake_backends.values())

    @pytest.mark.asyncio
    async def test_reads_form_and_resources_once(self, dispatcher):
        store = InMemoryForms(
            {7: {"id": 7, "prompt_template": "{{q}}", "provider": "openai", "model": "gpt-4o-mini"}},
            {7: [{"name": "A", "content": "x"}]},
        )
        executor = FormExecutor(dispatcher, store=store)

        await executor.execute(7, {"q": "why"}, credential="sk")

        assert store.reads == [("form", 7), ("resources", 7)]

    @pytest.mark.asyncio
    async def test_error_kinds_surface(self, dispatcher):
        store = InMemoryForms({
            1: {"id": 1, "prompt_template": "x", "provider": "anthropic", "model": ""},
            2: {"id": 2, "prompt_template": "x", "provider": "openai", "model": ""},
        })
        executor = FormExecutor(dispatcher, store=store)

        invalid = await executor.execute(1, {}, credential="k")
        missing = await executor.execute(2, {})

        assert invalid.error_kind == "invalid_provider"
        assert missing.error_kind == "missing_credential"
        assert missing.text is None

    @pytest.mark.asyncio
    async def test_backend_error_result(self, settings, make_backend):
        backend = make_backend(error=ConnectionError("connection reset"))
        store = InMemoryForms({1: {"id": 1, "prompt_template": "x", "provider": "deepseek", "model": ""}})
        executor = FormExecutor(
            ProviderDispatcher(settings, backends={Provider.DEEPSEEK: backend}),
            store=store,
        )

        result = await executor.execute(1, {}, credential="k")

        assert result.error_kind == "backend_error"
        assert result.message == "connection reset"


class TestExecuteWithStore:

    @pytest.mark.asyncio
    async def test_resources_injected_in_attachment_order(self, store_db, dispatcher, fake_backends):
        second = resource_store.create_resource("B", "y")
        first = resource_store.create_resource("A", "x")
        form_id = form_store.create_form(
            "Ask",
            prompt_template="Answer {{q}}",
            provider="openai",
            resource_ids=[first, second],
        )
        executor = FormExecutor(dispatcher)

        result = await executor.execute(form_id, {}, credential="sk")

        assert result.ok
        prompt = fake_backends[Provider.OPENAI].calls[0]["prompt"]
        assert prompt.startswith("Answer {{q}}\n\n# Reference Knowledge:\n")
        assert prompt.index("--- Source: A ---\nx") < prompt.index("--- Source: B ---\ny")

    def test_build_prompt_does_not_write(self, store_db, dispatcher):
        form_id = form_store.create_form("T", prompt_template="{{a}}")
        before = form_store.get_form_detail(form_id)

        _, prompt = FormExecutor(dispatcher).build_prompt(form_id, {"a": "1"})

        assert prompt == "1"
        assert form_store.get_form_detail(form_id) == before
