"""Custom exceptions for the POS application."""


class PosError(Exception):
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


class BusinessLogicError(PosError):
    """Exception raised for business logic violations."""
    def __init__(self, message, status_code=400, payload=None):
        super().__init__(message, status_code, payload)


class InvalidOperationError(BusinessLogicError):
    """Raised when an operation is not allowed in the current state (e.g. empty cart checkout)."""
    def __init__(self, message, payload=None):
        super().__init__(message, status_code=400, payload=payload)


class NotFoundError(PosError):
    """Exception raised when a resource is not found."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)


class InsufficientStockError(BusinessLogicError):
    """Raised when a reservation would push stock below zero and negative stock is disallowed."""
    def __init__(self, product_name, required, available):
        message = f"Stock insuficiente para {product_name}: se requieren {required}, disponible {available}"
        super().__init__(message, status_code=409, payload={
            'required': required,
            'available': available,
        })
