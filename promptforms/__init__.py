"""Prompt Forms - reusable LLM prompt templates.

Users define forms (a prompt template plus input fields and attached
reference resources). Submitting a form composes the final prompt and
dispatches it to the configured LLM provider (Gemini, OpenAI, DeepSeek).
"""

__version__ = "0.1.0"
