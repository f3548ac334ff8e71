"""Custom exceptions for the warranty registration application."""

class WarrantyError(Exception):
    """Base exception for all application errors."""
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

class BusinessLogicError(WarrantyError):
    """Exception raised for business logic violations."""
    def __init__(self, message, status_code=400, payload=None):
        super().__init__(message, status_code, payload)

class NotFoundError(WarrantyError):
    """Exception raised when a resource is not found."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)

class UnauthorizedError(WarrantyError):
    """Raised when a user lacks permission for an action."""
    def __init__(self, message="Unauthorized access", status_code=403):
        super().__init__(message, status_code)

class InvalidQuantityError(BusinessLogicError):
    """Raised when a unit quantity is not a positive integer within bounds."""
    def __init__(self, quantity, max_quantity=None):
        if max_quantity is not None:
            message = f"Invalid quantity {quantity}: must be between 1 and {max_quantity}"
        else:
            message = f"Invalid quantity {quantity}: must be a positive integer"
        super().__init__(message, payload={'quantity': quantity})

class InvalidTransitionError(BusinessLogicError):
    """Raised when a status change is not allowed by the lifecycle."""
    def __init__(self, entity, current, target):
        message = f"Cannot move {entity} from '{current}' to '{target}'"
        super().__init__(message, status_code=409, payload={'current': current, 'target': target})

class UnitNotFoundError(NotFoundError):
    """Raised when no product unit matches a QR token."""
    def __init__(self, qr_token=None):
        super().__init__("Product not found")
        self.qr_token = qr_token

class AlreadyActivatedError(BusinessLogicError):
    """Raised when activating a unit whose warranty was already activated."""
    def __init__(self, serial_key=None):
        message = "This product has already been activated"
        if serial_key:
            message = f"Product {serial_key} has already been activated"
        super().__init__(message, status_code=409)

class DuplicateIdentifierError(BusinessLogicError):
    """Raised when the storage layer keeps rejecting generated identifiers."""
    def __init__(self, attempts):
        message = f"Could not generate a unique serial key / QR token after {attempts} attempts"
        super().__init__(message, status_code=409)
