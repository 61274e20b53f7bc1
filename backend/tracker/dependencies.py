"""
Behavior Tracker Backend: Request Dependencies
==============================================

FastAPI dependencies that hand raw request input to the validation engine.
Routes never let FastAPI parse bodies into models: every payload goes
through `validate_or_raise` so all failures share one 400 shape.
"""

import json
from typing import Any, Dict, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tracker.exceptions import AuthenticationError, ValidationError
from tracker.services.auth_service import AuthService, get_auth_service

bearer_scheme = HTTPBearer(auto_error=False)


async def json_body(request: Request) -> Dict[str, Any]:
    """The request body as a JSON object; anything else is a 400."""
    raw = await request.body()
    if not raw:
        return {}
    try:
        payload = json.loads(raw)
    except ValueError:
        raise ValidationError(
            message="Request body is not valid JSON",
            errors=[{"field": "body", "message": "Malformed JSON", "code": "json_invalid"}],
        ) from None
    if not isinstance(payload, dict):
        raise ValidationError(
            message="Request body must be a JSON object",
            errors=[{"field": "body", "message": "Expected an object", "code": "dict_type"}],
        )
    return payload


def query_params(request: Request) -> Dict[str, str]:
    return dict(request.query_params)


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> str:
    """User id (`sub`) of a valid bearer token, else 401."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationError("Missing bearer token")
    return auth.decode_token(credentials.credentials)["sub"]
