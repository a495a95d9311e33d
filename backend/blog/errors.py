"""Domain error kinds raised by services and mapped to HTTP by `main`.

Each class carries the status code the HTTP boundary answers with. The
message is a short developer-facing detail; user-facing wording belongs
to whatever renders the response.
"""


class BlogError(Exception):
    """Base class for every error the lifecycles raise on purpose."""
    status_code = 500
    kind = "error"

    def __init__(self, detail: str = ""):
        super().__init__(detail or self.kind)
        self.detail = detail or self.kind


class AuthenticationRequired(BlogError):
    """No user is logged in on a session where one is mandatory."""
    status_code = 401
    kind = "authentication_required"


class InvalidCredentials(BlogError):
    status_code = 401
    kind = "invalid_credentials"


class Conflict(BlogError):
    """A uniqueness rule was violated (duplicate username)."""
    status_code = 409
    kind = "conflict"


class NotFound(BlogError):
    status_code = 404
    kind = "not_found"


class Forbidden(BlogError):
    """Authenticated, but not the owner of the targeted resource."""
    status_code = 403
    kind = "forbidden"


class ValidationFailed(BlogError):
    status_code = 400
    kind = "validation_failed"
