"""Middleware for request validation and error handling."""
import logging

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from fairspin.errors import ErrorCode, GameError
from fairspin.logic.errors import FairnessError


logger = logging.getLogger(__name__)


class PlayerIdMiddleware(BaseHTTPMiddleware):
    """Validate X-Player-Id header on session endpoints."""

    # Paths that require X-Player-Id; /verify is public
    PROTECTED_PATHS = {"/commitment", "/nonce", "/spin", "/rotate", "/reset", "/session"}

    async def dispatch(self, request: Request, call_next):
        if request.url.path in self.PROTECTED_PATHS:
            player_id = request.headers.get("X-Player-Id")
            if not player_id:
                error = GameError(
                    ErrorCode.INVALID_REQUEST,
                    "Missing required header: X-Player-Id",
                )
                return error.to_response()
            # Store player_id in request state for handlers
            request.state.player_id = player_id

        return await call_next(request)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Convert GameError and fairness failures to protocol-compliant responses."""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except GameError as e:
            return e.to_response()
        except FairnessError as e:
            logger.critical("Fairness failure on %s: %s", request.url.path, e)
            return GameError.from_fairness_error(e).to_response()
        except Exception as e:
            logger.exception("Unhandled error on %s", request.url.path)
            error = GameError(ErrorCode.INTERNAL_ERROR, str(e))
            return error.to_response()
