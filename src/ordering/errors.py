"""Errors raised by the Ordering domain that Protean has no equivalent for.

Missing records surface as ``protean.exceptions.ObjectNotFoundError`` and bad
input as ``protean.exceptions.ValidationError``; only ownership and role
checks need their own type.
"""


class NotAuthorizedError(Exception):
    """Raised when the caller does not own the resource or lacks the admin role."""

    def __init__(self, message: str = "Not authorized"):
        self.message = message
        super().__init__(message)


def ensure_owner(customer_id, caller_id, action: str = "access this order") -> None:
    """Raise unless ``caller_id`` owns a resource belonging to ``customer_id``.

    Guest orders (no customer) have no owner and are never accessible through
    customer-facing operations.
    """
    if not customer_id or not caller_id or str(customer_id) != str(caller_id):
        raise NotAuthorizedError(f"Not authorized to {action}")


def ensure_admin(role, action: str = "perform this action") -> None:
    if role != "admin":
        raise NotAuthorizedError(f"Not authorized to {action}")


def ensure_owner_or_admin(customer_id, caller_id, role, action: str = "access this order") -> None:
    if role == "admin":
        return
    ensure_owner(customer_id, caller_id, action)


def ensure_customer(caller_id, action: str = "use the cart") -> str:
    """Return the caller's id, or raise if the request is anonymous."""
    if not caller_id:
        raise NotAuthorizedError(f"Sign in to {action}")
    return str(caller_id)
