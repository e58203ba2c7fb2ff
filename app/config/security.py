# app/config/security.py
# Security configuration for sessions, passwords and the super-admin account

import os
from typing import List

from dotenv import load_dotenv

load_dotenv()

DEFAULT_SECRET_KEY = "super-secret-key-change-this"


class SecurityConfig:
    """Security configuration for the application"""

    # Session credential settings
    SESSION = {
        'secret_key': os.getenv('SECRET_KEY', DEFAULT_SECRET_KEY),
        'algorithm': os.getenv('ALGORITHM', 'HS256'),
        'ttl_hours': int(os.getenv('SESSION_TTL_HOURS', 24)),
        'cookie_name': os.getenv('SESSION_COOKIE_NAME', 'session_token'),
        'cookie_path': '/',
        'cookie_samesite': 'lax',
    }

    # Account settings
    ACCOUNTS = {
        'super_admin_username': os.getenv('SUPER_ADMIN_USERNAME', 'nkc'),
        'min_password_length': int(os.getenv('MIN_PASSWORD_LENGTH', 4)),
        'password_schemes': ['pbkdf2_sha256'],
    }

    # Routes reachable without a session
    PUBLIC_PATHS = ('/login', '/auth', '/health', '/docs', '/redoc', '/openapi.json')

    ENVIRONMENT = os.getenv('ENVIRONMENT', 'development')

    @classmethod
    def is_production(cls) -> bool:
        return cls.ENVIRONMENT.lower() == 'production'

    @classmethod
    def session_max_age(cls) -> int:
        """Cookie lifetime in seconds"""
        return cls.SESSION['ttl_hours'] * 60 * 60

    @classmethod
    def is_public_path(cls, path: str) -> bool:
        """Check if a request path is exempt from the session gate"""
        return any(path == prefix or path.startswith(prefix + '/') for prefix in cls.PUBLIC_PATHS)

    @classmethod
    def cors_origins(cls) -> List[str]:
        raw = os.getenv('CORS_ORIGINS', 'http://localhost:3000,http://127.0.0.1:3000')
        return [origin.strip() for origin in raw.split(',') if origin.strip()]
