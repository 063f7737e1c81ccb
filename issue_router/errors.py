"""Error taxonomy for issue-router."""


class IssueRouterError(Exception):
    """Base class for every error raised by issue-router."""


class UnknownDestination(IssueRouterError, KeyError):
    """Destination id is not registered in the keyword registry."""

    def __init__(self, destination: str, suggestions: list[str] | None = None):
        self.destination = destination
        self.suggestions = suggestions or []
        message = f"Unknown destination '{destination}'"
        if self.suggestions:
            message += f". Did you mean: {', '.join(self.suggestions)}?"
        super().__init__(message)

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message
        return self.args[0]


class ExternalApiError(IssueRouterError):
    """A call to the issue tracker or another external service failed."""

    def __init__(self, service: str, message: str, status_code: int | None = None):
        self.service = service
        self.status_code = status_code
        prefix = f"{service} API error"
        if status_code is not None:
            prefix += f" {status_code}"
        super().__init__(f"{prefix}: {message}")


class ParseError(IssueRouterError):
    """A back-reference (e.g. a linked ticket id) could not be extracted."""
