"""
Friendly error messages for WeDeploy API faults

Maps API error reasons to human messages, with per-command overrides.
"""

from enum import Enum
from typing import Dict, Optional, Tuple

from wedeploy_cli.exceptions import APIFault, WeDeployError

PLAN_UPGRADE_URL = "https://console.wedeploy.com/account/billing"


class ErrorReason(Enum):
    """Error reasons the API is known to return."""

    RESTRICTED = "restricted"
    UNAUTHORIZED = "unauthorized"
    INVALID_CREDENTIALS = "invalidCredentials"
    DOCUMENT_NOT_FOUND = "documentNotFound"
    NOT_FOUND = "notFound"
    BAD_REQUEST = "badRequest"
    INTERNAL_ERROR = "internalError"
    PROJECT_QUOTA_EXCEEDED = "projectQuotaExceeded"
    EXCEEDED_PROJECT_MAXIMUM = "exceededProjectMaximum"
    INVALID_SERVICE = "invalidService"
    INVALID_PROJECT = "invalidProject"
    INVALID_ACCOUNT_EMAIL = "invalidAccountEmail"
    EMAIL_ALREADY_EXISTS = "emailAlreadyExists"
    EMAIL_INVALID_OR_USED = "emailInvalidOrAlreadyBeingUsed"
    INVALID_COLLABORATOR_EMAIL = "invalidCollaboratorEmail"
    INVALID_SERVICE_ID = "invalidServiceId"
    SERVICE_ALREADY_EXISTS = "serviceAlreadyExists"
    CUSTOM_DOMAIN_ALREADY_EXISTS = "customDomainAlreadyExists"
    INVALID_PROJECT_ID = "invalidProjectId"
    PROJECT_ALREADY_EXISTS = "projectAlreadyExists"
    ENVIRONMENT_VARIABLE_NOT_FOUND = "environmentVariableNotFound"
    EXCEEDED_PLAN_MAXIMUM = "exceededPlanMaximum"
    INVALID_PARAMETER = "invalidParameter"
    INVALID_DOCUMENT_VALUE = "invalidDocumentValue"
    DELETE_PROJECT = "deleteProject"
    VALIDATION_ERROR = "validationError"

    @classmethod
    def parse(cls, value: str) -> Optional["ErrorReason"]:
        try:
            return cls(value)
        except ValueError:
            return None


REASON_MESSAGES: Dict[ErrorReason, str] = {
    ErrorReason.RESTRICTED: "Access is restricted to collaborators",
    ErrorReason.UNAUTHORIZED: "Access is denied due to invalid credentials",
    ErrorReason.INVALID_CREDENTIALS: "Access is denied due to invalid credentials",
    ErrorReason.DOCUMENT_NOT_FOUND: "Not found",
    ErrorReason.NOT_FOUND: "Not found",
    ErrorReason.BAD_REQUEST: "The API request is invalid or improperly formed",
    ErrorReason.INTERNAL_ERROR: "The request failed due to an internal error",
    ErrorReason.PROJECT_QUOTA_EXCEEDED: "Project quota exceeded",
    ErrorReason.EXCEEDED_PROJECT_MAXIMUM: "Project quota exceeded",
    ErrorReason.INVALID_SERVICE: "Invalid service",
    ErrorReason.INVALID_PROJECT: "Invalid project",
    ErrorReason.INVALID_ACCOUNT_EMAIL: "Invalid email account",
    ErrorReason.EMAIL_ALREADY_EXISTS: "Email already exists",
    ErrorReason.EMAIL_INVALID_OR_USED: "Email is invalid or already being used",
    ErrorReason.INVALID_COLLABORATOR_EMAIL: "Invalid collaborator email",
    ErrorReason.INVALID_SERVICE_ID: "Invalid service ID",
    ErrorReason.SERVICE_ALREADY_EXISTS: "Service already exists",
    ErrorReason.CUSTOM_DOMAIN_ALREADY_EXISTS: "Custom domain already exists",
    ErrorReason.INVALID_PROJECT_ID: "Invalid project ID",
    ErrorReason.PROJECT_ALREADY_EXISTS: "Project already exists",
    ErrorReason.ENVIRONMENT_VARIABLE_NOT_FOUND: "Environment variable not found",
    ErrorReason.EXCEEDED_PLAN_MAXIMUM: f"You've reached your plan limits. Upgrade at {PLAN_UPGRADE_URL}",
}

COMMAND_OVERRIDES: Dict[str, Dict[ErrorReason, str]] = {
    "deploy": {
        ErrorReason.INVALID_DOCUMENT_VALUE: "Access denied to this project",
        ErrorReason.RESTRICTED: (
            "Looks like this project already exists and you don't have access to it.\n"
            "Please try another project ID or make sure someone adds you as a collaborator"
        ),
    },
    "delete": {
        ErrorReason.DELETE_PROJECT: "Can not delete project",
        ErrorReason.INVALID_SERVICE: "Not found",
    },
    "login": {
        ErrorReason.VALIDATION_ERROR: "Invalid credentials",
    },
}


class FriendlyError(WeDeployError):
    """API fault rendered with friendly messages; keeps the original fault."""

    def __init__(self, message: str, fault: APIFault):
        self.fault = fault
        super().__init__(message)


def _invalid_parameter(context: Dict[str, str]) -> str:
    if context.get("message"):
        return context["message"]
    return f'Invalid value "{context.get("value", "")}" for parameter "{context.get("param", "")}"'


def friendly_message(
    command: str, reason: str, context: Optional[Dict[str, str]] = None
) -> Tuple[str, bool]:
    """
    Look up a message for a reason.

    Tries the command, then each parent command ("env-var set" -> "env-var"),
    then the global table.

    Returns:
        (message, found)
    """
    context = context or {}
    parsed = ErrorReason.parse(reason)
    if parsed is None:
        return "", False

    local = command.strip()
    while local:
        overrides = COMMAND_OVERRIDES.get(local, {})
        if parsed in overrides:
            return overrides[parsed], True
        local = " ".join(local.split(" ")[:-1])

    if parsed is ErrorReason.INVALID_PARAMETER:
        return _invalid_parameter(context), True

    message = REASON_MESSAGES.get(parsed)
    if message is None:
        return "", False
    return message, True


def handle(command: str, error: Exception) -> Exception:
    """
    Convert an error into its friendliest form.

    Non-API errors are returned untouched. An API fault with no known
    reasons is also returned untouched.
    """
    if not isinstance(error, APIFault):
        return error

    messages = []
    any_friendly = False

    for item in error.errors:
        message, found = friendly_message(command, item.reason, item.context)
        if found:
            any_friendly = True
            messages.append(message)
        else:
            messages.append(f"{item.reason}: {item.message}")

    if not any_friendly:
        return error

    return FriendlyError("\n".join(messages), error)
