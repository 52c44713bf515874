"""API routes describing the supported LLM providers."""

from fastapi import APIRouter

from promptforms.llm.dispatcher import list_provider_specs

router = APIRouter(prefix="/providers", tags=["providers"])


@router.get("")
async def list_providers():
    """Supported providers with their default and suggested models.

    Form builders use this to populate provider/model pickers. Any model
    string is accepted on a form; suggestions are not a whitelist.
    """
    return [
        {
            "id": spec.provider.value,
            "name": spec.name,
            "default_model": spec.default_model,
            "models": list(spec.suggested_models),
            "uses_default_credential": spec.uses_default_credential,
        }
        for spec in list_provider_specs()
    ]
