"""
Application errors.

Every failure a handler can report to the client is one of the classes
below. Each carries a stable ``code`` the web client branches on, the HTTP
status it is rendered with, and a message that is safe to show. The single
handler registered in ``eventreg.main`` turns them into
``{"status": "error", "code": ..., "message": ...}``.
"""

from typing import Optional


class AppError(Exception):
    code = "internalError"
    status_code = 500
    message = "Something went wrong"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        if message is not None:
            self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationError(AppError):
    code = "validationError"
    status_code = 400
    message = "Invalid input"


class UserAlreadyExists(AppError):
    code = "userAlreadyExists"
    status_code = 400
    message = "Email already registered."


class UserNotExist(AppError):
    code = "userNotExist"
    status_code = 404

    def __init__(self, email: str, status_code: Optional[int] = None):
        super().__init__(f"User with {email} not registered.", status_code)


class PasswordIncorrect(AppError):
    code = "passwordIncorrect"
    status_code = 400
    message = "Incorrect password."


class EmailNotConfirmed(AppError):
    code = "emailNotConfirmed"
    status_code = 403
    message = "Please confirm your email before logging in."


class TokenInvalid(AppError):
    code = "tokenInvalid"
    status_code = 401
    message = "User not logged in."


class InvalidOrExpiredToken(AppError):
    code = "invalidOrExpiredToken"
    status_code = 400
    message = "Token is invalid or has expired."


class InvalidOTP(AppError):
    code = "invalidOtp"
    status_code = 400
    message = "Invalid OTP."


class TeamNameRequired(AppError):
    code = "teamNameRequired"
    status_code = 400
    message = "Team name is required."


class TeamNameTaken(AppError):
    code = "teamNameTaken"
    status_code = 400
    message = "Team name already exists."


class NotInTeam(AppError):
    code = "notInTeam"
    status_code = 400
    message = "You can only register a team you are a member of."


class TeammatesAlreadyRegistered(AppError):
    code = "teammatesAlreadyRegistered"
    status_code = 400
    message = "One or more teammates are already registered for this event."


class NotAuthorized(AppError):
    code = "notAuthorized"
    status_code = 403
    message = "You are not authorized to perform this action."


class EmailDeliveryError(AppError):
    code = "emailDeliveryFailed"
    status_code = 500
    message = "There was an error sending the email. Try again later."
