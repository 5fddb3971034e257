"""Error taxonomy shared by the upstream clients, handlers and routes."""


class HubError(Exception):
    """Base class for every error the hub maps to an HTTP response."""

    status_code = 500

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class ValidationError(HubError):
    """A required request parameter is missing or blank."""

    status_code = 400

    def __init__(self, message, example=None):
        super().__init__(message)
        self.example = example


class NotFoundError(HubError):
    """The upstream provider reported no match for the query."""

    status_code = 404


class UpstreamError(HubError):
    """Any other upstream failure: transport, HTTP status, bad payload."""

    status_code = 500

    def __init__(self, provider, message, upstream_status=None):
        super().__init__(message)
        self.provider = provider
        self.upstream_status = upstream_status
