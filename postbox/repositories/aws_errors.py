from typing import Any

from botocore.exceptions import ClientError, NoCredentialsError, PartialCredentialsError

from postbox.errors import AuthenticationError, NotFoundError, PersistenceError, PostboxError

AUTH_ERROR_CODES = {
    "UnrecognizedClientException",
    "InvalidSignatureException",
    "SignatureDoesNotMatch",
    "InvalidClientTokenId",
    "InvalidAccessKeyId",
    "IncompleteSignature",
    "ExpiredToken",
    "ExpiredTokenException",
    "AccessDenied",
    "AccessDeniedException",
    "MissingAuthenticationToken",
}

NOT_FOUND_ERROR_CODES = {"ResourceNotFoundException", "NoSuchBucket"}


def error_code(exc: Exception) -> str:
    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Code", "") or ""
    return type(exc).__name__


def error_message(exc: Exception) -> str:
    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Message", "") or str(exc)
    return str(exc)


def translate_aws_error(
    exc: Exception, *, resource: str, credential_context: dict[str, Any] | None = None
) -> PostboxError:
    """Map a botocore failure onto the error taxonomy.

    ``credential_context`` must already be masked; it is attached only to
    authentication failures.
    """
    code = error_code(exc)
    message = error_message(exc)
    context: dict[str, Any] = {"resource": resource, "providerCode": code}

    if (
        code in AUTH_ERROR_CODES
        or "signature" in message.lower()
        or isinstance(exc, (NoCredentialsError, PartialCredentialsError))
    ):
        context.update(credential_context or {})
        return AuthenticationError(f"AWS authentication failed: {message}", context=context)

    if code in NOT_FOUND_ERROR_CODES:
        return NotFoundError(f"{resource} does not exist: {message}", context=context)

    return PersistenceError(f"AWS request failed for {resource}: {message}", context=context)
