# workforce/config/security.py
# Static security tables shared by middleware, logging and the auth layer

from typing import Any, Dict


class SecurityConfig:
    """Security configuration for the application"""

    # Response headers added to every HTTP response
    SECURITY_HEADERS = {
        'X-Content-Type-Options': 'nosniff',
        'X-Frame-Options': 'DENY',
        'X-XSS-Protection': '1; mode=block',
        'Strict-Transport-Security': 'max-age=31536000; includeSubDomains',
        'Content-Security-Policy': "default-src 'self'; style-src 'self' 'unsafe-inline'; img-src 'self' data: https:",
        'Referrer-Policy': 'strict-origin-when-cross-origin',
    }

    # Request body fields never written to logs
    SENSITIVE_FIELDS = {
        'password', 'currentPassword', 'newPassword', 'token', 'refreshToken',
        'current_password', 'new_password', 'refresh_token',
    }

    REDACTED = '[REDACTED]'

    # Credential rules
    PASSWORD_MIN_LENGTH = 6
    PASSWORD_MAX_LENGTH = 128

    # Largest request body kept in memory for error logging
    MAX_LOGGED_BODY_BYTES = 16 * 1024

    @classmethod
    def is_sensitive(cls, field: str) -> bool:
        return field in cls.SENSITIVE_FIELDS

    @classmethod
    def redact(cls, payload: Any) -> Any:
        """Return a copy of payload with sensitive keys masked, recursively"""
        if isinstance(payload, dict):
            redacted: Dict[str, Any] = {}
            for key, value in payload.items():
                if cls.is_sensitive(str(key)):
                    redacted[key] = cls.REDACTED
                else:
                    redacted[key] = cls.redact(value)
            return redacted
        if isinstance(payload, list):
            return [cls.redact(item) for item in payload]
        return payload
