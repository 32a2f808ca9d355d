"""Request validators."""
from fairspin.errors import ErrorCode, GameError
from fairspin.protocol import SpinRequest


MAX_CLIENT_REQUEST_ID_LENGTH = 128


def validate_client_request_id(request: SpinRequest) -> None:
    """
    Validate idempotency key.

    Raises INVALID_REQUEST if blank, too long or containing whitespace.
    """
    request_id = request.clientRequestId
    if (
        not request_id.strip()
        or len(request_id) > MAX_CLIENT_REQUEST_ID_LENGTH
        or any(ch.isspace() for ch in request_id)
    ):
        raise GameError(
            ErrorCode.INVALID_REQUEST,
            f"clientRequestId must be 1-{MAX_CLIENT_REQUEST_ID_LENGTH} "
            "characters without whitespace.",
        )


def validate_spin_request(request: SpinRequest) -> None:
    """Run all validations on spin request.

    An unusable clientSeed is not rejected here: the RNG keeps the stored
    client seed instead.
    """
    validate_client_request_id(request)
