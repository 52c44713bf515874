"""Form templates and their execution.

- schemas: form, field, resource and execution models
- compositor: builds the final prompt from template, resources and inputs
- executor: loads a form, composes its prompt and dispatches it
"""
