"""
Domain errors raised by the procurement services.

Each error carries the HTTP status the API answers with; the handlers in
``print_erp.main`` render them as ``{"detail": message}``.
"""


class ERPError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ERPError):
    status_code = 404


class BusinessRuleError(ERPError):
    """Input is well-formed but violates a business rule (overpayment, negative stock...)."""
    status_code = 400


class InvalidTransitionError(ERPError):
    status_code = 409

    def __init__(self, entity: str, current: str, requested: str, allowed=None):
        if allowed:
            message = (
                f"Cannot change {entity} status from {current} to {requested}. "
                f"Valid transitions: {', '.join(allowed)}"
            )
        else:
            message = f"Cannot change {entity} status from {current} to {requested}"
        super().__init__(message)
        self.current = current
        self.requested = requested


class ConflictError(ERPError):
    status_code = 409
