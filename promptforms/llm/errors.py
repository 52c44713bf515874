"""Errors raised while executing a form.

Every error carries a stable `kind` string that callers surface verbatim.
None of them are retried.
"""


class ExecutionError(Exception):
    """Base class for form execution failures."""

    kind = "execution_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class FormNotFoundError(ExecutionError):
    """The requested form id does not exist."""

    kind = "form_not_found"


class MissingCredentialError(ExecutionError):
    """No credential was supplied and the provider has no fallback.

    Raised before any backend is contacted.
    """

    kind = "missing_credential"


class InvalidProviderError(ExecutionError):
    """The form names a provider outside the supported set.

    Raised before any backend is contacted.
    """

    kind = "invalid_provider"


class BackendError(ExecutionError):
    """The provider call failed (network, auth, quota, malformed response).

    The original exception is chained as __cause__.
    """

    kind = "backend_error"
