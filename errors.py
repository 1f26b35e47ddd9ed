"""Custom exceptions for the portfolio backend."""


class PortfolioError(Exception):
    """Base exception for all portfolio backend errors."""

    status_code = 500


class InvalidInputError(PortfolioError):
    """Raised when required input is missing or malformed."""

    status_code = 400


class NotFoundError(PortfolioError):
    """Raised when a referenced document doesn't exist."""

    status_code = 404

    def __init__(self, kind: str, ref: str | None = None):
        self.kind = kind
        self.ref = ref
        super().__init__(f"{kind} not found")


class BusinessRuleError(PortfolioError):
    """Raised when a request is well-formed but breaks a domain rule."""

    status_code = 400


class InsufficientStockError(BusinessRuleError):
    """Raised when a product has fewer units than requested."""

    def __init__(self, product_name: str | None = None):
        self.product_name = product_name
        msg = "Not enough stock available"
        if product_name:
            msg = f"Not enough stock for {product_name}"
        super().__init__(msg)


class EmptyCartError(BusinessRuleError):
    """Raised on checkout when the cart has no items."""

    def __init__(self):
        super().__init__("Cart is empty")


class NoValidUpdatesError(BusinessRuleError):
    """Raised when an order update carries none of the allow-listed fields."""

    def __init__(self):
        super().__init__("No valid updates provided")


class InvalidTransitionError(BusinessRuleError):
    """Raised when an order status change is not an edge of the state machine."""

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot change order status from {current} to {requested}")


class DuplicateEmailError(BusinessRuleError):
    """Raised when a SaaS user email is already registered."""

    def __init__(self, email: str):
        self.email = email
        super().__init__("Email already registered")


class DatabaseNotConfiguredError(PortfolioError):
    """Raised when DATABASE_URL or DATABASE_NAME is missing."""

    def __init__(self):
        super().__init__("Database not configured")


def describe_validation_errors(errors) -> str:
    """Render the first pydantic error as 'field: message'."""
    if not errors:
        return "Invalid input"
    first = errors[0]
    loc = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query"))
    if loc:
        return f"{loc}: {first['msg']}"
    return first["msg"]
