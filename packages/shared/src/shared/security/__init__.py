from shared.security.jwt_utils import AuthTokenPayload, JWTManager
from shared.security.sanitize import sanitize_html_text, validate_search_input

__all__ = [
    "AuthTokenPayload",
    "JWTManager",
    "sanitize_html_text",
    "validate_search_input",
]
