"""Service-level errors.

Services raise these; the API layer turns any ServiceError into a JSON
response carrying the user-facing message, so the client can show a toast
and keep whatever the user already typed.
"""

from typing import Optional


class ServiceError(Exception):
    status_code = 500
    message = "Something went wrong. Please try again."

    def __init__(self, message: Optional[str] = None):
        if message:
            self.message = message
        super().__init__(self.message)


class ValidationFailed(ServiceError):
    status_code = 422
    message = "Please fill in all required fields"

    def __init__(self, message: Optional[str] = None, step: Optional[int] = None):
        self.step = step
        super().__init__(message)


class SubmitFailed(ServiceError):
    message = "Failed to submit. Please try again."


class UpdateFailed(ServiceError):
    message = "Failed to update. Please try again."


class UploadFailed(ServiceError):
    message = "Failed to upload file"


class AssignFailed(ServiceError):
    message = "Failed to assign developer"


class DeveloperNotAssignable(AssignFailed):
    status_code = 409
    message = "Developer is not approved or not available"


class DuplicateAssignment(ServiceError):
    status_code = 409
    message = "Developer is already assigned to this project"


class ProfileAlreadyExists(ServiceError):
    status_code = 409
    message = "Failed to create profile. You may already have one."


class ProfileMissing(ServiceError):
    status_code = 404
    message = "Developer profile not found"
    redirect = "/developer/onboarding"


class NotFound(ServiceError):
    status_code = 404
    message = "Not found"


class AuthFailed(ServiceError):
    status_code = 401
    message = "Invalid email or password"


class NotAuthenticated(ServiceError):
    status_code = 401
    message = "Please sign in to continue"
    redirect = "/auth"


class Forbidden(ServiceError):
    status_code = 403
    message = "You do not have access to this area"
    redirect = "/auth"


class InvalidTransition(ServiceError):
    status_code = 409
    message = "This change is not allowed"
