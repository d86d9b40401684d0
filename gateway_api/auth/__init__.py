"""Registro y login de usuarios.

- passwords.py: hash PBKDF2 con salt
- validators.py: reglas de usuario/contraseña
- tokens.py: JWT de acceso
"""

from .passwords import hash_password, verify_password
from .tokens import decode_token, issue_token
from .validators import validate_password, validate_username

__all__ = [
    "hash_password",
    "verify_password",
    "decode_token",
    "issue_token",
    "validate_password",
    "validate_username",
]
