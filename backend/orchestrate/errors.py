"""Domain errors raised by the rule engine and rendered by the API layer."""


class OrchestrateError(Exception):
    status_code = 500
    code = "internal_error"
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(OrchestrateError):
    status_code = 400
    code = "validation_error"
    default_message = "Invalid input"


class Unauthorized(OrchestrateError):
    status_code = 401
    code = "unauthorized"
    default_message = "Invalid credentials"


class Forbidden(OrchestrateError):
    status_code = 403
    code = "forbidden"
    default_message = "Forbidden"


class NotFound(OrchestrateError):
    status_code = 404
    code = "not_found"
    default_message = "Not found"


class ConflictError(OrchestrateError):
    status_code = 409
    code = "conflict"
    default_message = "Conflict"


class InternalError(OrchestrateError):
    pass
