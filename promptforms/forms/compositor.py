"""Prompt composition for form execution.

Builds the final prompt from three inputs:
- the form's stored prompt template
- the attached resources (appended as a reference-knowledge block)
- the submitted field values (substituted into {{name}} placeholders)

Substitution is literal and single-pass. Field names are matched as plain
text, never as patterns, and text inserted for one placeholder is never
scanned again. Placeholders without a submitted value stay in the output.
"""

import re
from typing import Any, Iterable, Mapping, Union

REFERENCE_HEADER = "\n\n# Reference Knowledge:\n"

ResourceLike = Union[Mapping[str, Any], tuple[str, str]]


def placeholder(name: str) -> str:
    """The literal token a template uses to reference a field."""
    return "{{" + name + "}}"


def _resource_parts(resource: ResourceLike) -> tuple[str, str]:
    if isinstance(resource, Mapping):
        return str(resource.get("name") or ""), str(resource.get("content") or "")
    name, content = resource
    return name, content


def build_reference_block(resources: Iterable[ResourceLike]) -> str:
    """Render attached resources as a delimited block, in the given order.

    Returns an empty string when there are no resources.
    """
    block = ""
    for resource in resources:
        name, content = _resource_parts(resource)
        block += f"\n--- Source: {name} ---\n{content}\n"
    if not block:
        return ""
    return REFERENCE_HEADER + block


def substitute_placeholders(text: str, inputs: Mapping[str, Any]) -> str:
    """Replace every {{key}} for key in inputs with str(value).

    All tokens are replaced in one scan of the original text, so a value
    containing "{{...}}" is inserted verbatim.
    """
    if not inputs:
        return text

    values = {placeholder(key): str(value) for key, value in inputs.items()}
    # Longest token first so that overlapping keys resolve to the fullest match
    tokens = sorted(values, key=len, reverse=True)
    pattern = re.compile("|".join(re.escape(token) for token in tokens))
    return pattern.sub(lambda match: values[match.group(0)], text)


def compose_prompt(
    template: str,
    resources: Iterable[ResourceLike],
    inputs: Mapping[str, Any],
) -> str:
    """Compose the prompt sent to the provider.

    Args:
        template: Stored prompt template (may be empty)
        resources: Attached resources as {name, content} mappings or
                   (name, content) pairs, in injection order
        inputs: Field name -> submitted value

    Returns:
        The template plus reference block, with placeholders substituted
    """
    prompt = (template or "") + build_reference_block(resources)
    return substitute_placeholders(prompt, inputs)
