class FinanceError(Exception):
    """Base class for every business-rule failure raised by the domain layer."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def context(self) -> dict:
        return {}


class ValidationError(FinanceError, ValueError):
    """Malformed or out-of-range input."""


class NotFoundError(FinanceError):
    """
    The entity does not exist or is not owned by the caller.
    Ownership failures raise this too, never a "forbidden" kind.
    """


class InsufficientFundsError(FinanceError):
    def __init__(self, balance: float, amount: float):
        super().__init__("Insufficient balance")
        self.balance = balance
        self.amount = amount

    def context(self) -> dict:
        return {"balance": self.balance, "amount": self.amount}


class OverpaymentError(FinanceError):
    def __init__(self, remaining: float):
        super().__init__(f"Payment exceeds remaining invoice balance of {remaining:.2f}")
        self.remaining = remaining

    def context(self) -> dict:
        return {"remaining": self.remaining}


class ConflictError(FinanceError):
    pass


class StorageError(FinanceError):
    """Unrecoverable storage failure. Never a business-rule violation."""
