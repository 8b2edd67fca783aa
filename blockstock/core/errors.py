from fastapi import status


class InventoryError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(InventoryError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(InventoryError):
    status_code = status.HTTP_404_NOT_FOUND


class InsufficientStockError(InventoryError):
    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(InventoryError):
    status_code = status.HTTP_409_CONFLICT
