"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/User
  2xxx: Product
  3xxx: Bid
  4xxx: User lists (cart, history, sell)
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth/User ---

class EmailExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "User with this email already exists", 409)


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "Invalid email or password", 401)


class AccountDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Account is deactivated", 403)


class InvalidRefreshTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Refresh token is invalid or expired", 401)


class UserNotFoundError(AppError):
    def __init__(self, user_id: str) -> None:
        super().__init__(1005, f"User not found: {user_id}", 404)


class ProfileForbiddenError(AppError):
    def __init__(self) -> None:
        super().__init__(1006, "You can only update your own profile", 403)


# --- 2xxx: Product ---

class InvalidIdError(AppError):
    def __init__(self, kind: str, value: str) -> None:
        super().__init__(2001, f"Invalid {kind} ID format: {value}", 400)


class ProductNotFoundError(AppError):
    def __init__(self, product_id: str) -> None:
        super().__init__(2002, f"Product not found: {product_id}", 404)


class ProductForbiddenError(AppError):
    def __init__(self, action: str) -> None:
        super().__init__(2003, f"Only product owner can {action}", 403)


class InvalidProductError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(2004, detail, 400)


class InvalidImageError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(2005, detail, 400)


class ImageNotFoundError(AppError):
    def __init__(self, product_id: str) -> None:
        super().__init__(2006, f"Image not found for product {product_id}", 404)


class DemandValueOverrideDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(2007, "demandValue is derived and cannot be set directly", 400)


# --- 3xxx: Bid ---

class InvalidBidAmountError(AppError):
    def __init__(self) -> None:
        super().__init__(3001, "Valid bid amount is required", 400)


class SelfBidError(AppError):
    def __init__(self) -> None:
        super().__init__(3002, "You cannot bid on your own product", 400)


class InvalidBidIndexError(AppError):
    def __init__(self) -> None:
        super().__init__(3003, "Invalid bid index", 400)


class BidIndexOutOfRangeError(AppError):
    def __init__(self, index: int, size: int) -> None:
        super().__init__(3004, f"Bid index out of range: {index} (bids: {size})", 400)


class BidNotFoundError(AppError):
    def __init__(self, bid_id: str) -> None:
        super().__init__(3005, f"Bid not found: {bid_id}", 404)


class InvalidBidStatusError(AppError):
    def __init__(self, status: str) -> None:
        super().__init__(3006, f"Invalid status: {status} (expected accepted or rejected)", 400)


class BidNotPendingError(AppError):
    def __init__(self, bid_id: str, status: str) -> None:
        super().__init__(3007, f"Bid {bid_id} in status {status} cannot change status", 409)


class InvalidBidListError(AppError):
    def __init__(self) -> None:
        super().__init__(3008, "Bids must be an array", 400)


class BidAlreadyAcceptedError(AppError):
    def __init__(self, product_id: str) -> None:
        super().__init__(3009, f"Product {product_id} already has an accepted bid", 409)


# --- 4xxx: User lists ---

class CartItemExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(4001, "Item already in cart", 400)


class CartItemNotFoundError(AppError):
    def __init__(self) -> None:
        super().__init__(4002, "Item not found in cart", 404)


class HistoryItemNotFoundError(AppError):
    def __init__(self) -> None:
        super().__init__(4003, "Order not found in history", 404)


class InvalidListPayloadError(AppError):
    def __init__(self, detail: str = "Invalid item in payload") -> None:
        super().__init__(4004, detail, 400)


class SellItemNotFoundError(AppError):
    def __init__(self) -> None:
        super().__init__(4005, "Item not listed for sale", 404)


class SellForbiddenError(AppError):
    def __init__(self) -> None:
        super().__init__(4006, "You can only list your own products", 403)


# --- 9xxx: System ---

class RequestValidationFailed(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(9001, detail, 400)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
