"""
Request-terminal errors. Each carries the HTTP status and the message shown to the user.

The app registers one exception handler that renders any SmetaError as
{"success": false, "message": ...}.
"""

from fastapi import status


class SmetaError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Ошибка запроса."

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# --- Access ---

class AccessDenied(SmetaError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Ошибка: Токен доступа отсутствует или недействителен."


class MissingToken(AccessDenied):
    default_message = "Ошибка: Токен доступа отсутствует."


class UnknownToken(AccessDenied):
    default_message = "Ошибка: Токен доступа недействителен."


class ExpiredToken(AccessDenied):
    default_message = "Ошибка: Срок действия вашего токена истек."


# --- Payments ---

class InvalidPayment(SmetaError):
    default_message = "Ошибка: неверные параметры подтверждения."


# --- Calculation input ---

class InvalidInput(SmetaError):
    default_message = "Некорректные исходные данные."

    def __init__(self, message: str = None, fields: tuple = ()):
        super().__init__(message)
        self.fields = tuple(fields)
