"""Custom exceptions for the pricer package."""


class PricerError(Exception):
    """Base exception for all pricer errors."""
    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['status'] = 'error'
        return rv


class QuoteValidationError(PricerError, ValueError):
    """Raised when an engine invariant is violated by the caller."""
    def __init__(self, message, payload=None):
        super().__init__(message, 400, payload)


class AssignmentQuantityError(QuoteValidationError):
    """Raised when a multiplier is assigned to more units than the item has."""
    def __init__(self, multiplier_id, assigned, total_quantity):
        message = (
            f"Multiplier {multiplier_id} assigned to {assigned} units "
            f"but the item only has {total_quantity}"
        )
        super().__init__(message, payload={
            'multiplier_id': multiplier_id,
            'assigned': assigned,
            'total_quantity': total_quantity,
        })
        self.multiplier_id = multiplier_id
        self.assigned = assigned
        self.total_quantity = total_quantity


class NotFoundError(PricerError):
    """Raised when a product, multiplier, item or catalog is not found."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)
