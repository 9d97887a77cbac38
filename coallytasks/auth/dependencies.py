"""FastAPI dependencies for authentication."""

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from coallytasks.auth.jwt import decode_access_token
from coallytasks.errors import Unauthorized

# HTTP Bearer token security scheme. Missing credentials are reported by
# get_current_user_id with the 401 body clients expect.
security = HTTPBearer(auto_error=False)


def get_current_user_id(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> str:
    """Get the authenticated user's ID from the bearer token.

    The token is checked statelessly (signature and expiry only); the user
    record is not looked up.

    Raises:
        Unauthorized: If the header is missing or the token is invalid
    """
    if not credentials or not credentials.credentials:
        raise Unauthorized()

    return decode_access_token(credentials.credentials, request.app.state.settings)
