# cws_client/services/password_generator.py
"""
One-time password generation

Generates the throwaway password that protects the PKCS#12 archive while it
is in transit from the certificate service. Passwords satisfy the service's
download password complexity rules.
"""

import logging
import secrets
import string
from typing import Optional

from ..config import settings
from ..exceptions import PasswordGenerationError

logger = logging.getLogger(__name__)


class PasswordGenerator:
    """Cryptographically secure password generator"""

    MIN_PASSWORD_LENGTH = 15
    MAX_PASSWORD_LENGTH = 100
    DEFAULT_PASSWORD_LENGTH = settings.KEYSTORE_PASSWORD_LENGTH
    SPECIAL_CHARS = "!@#$%^&*()_+-=[]{}|;:,.<>?"
    PASSWORD_CHARSET = string.ascii_letters + string.digits + SPECIAL_CHARS

    def __init__(self):
        self._random = secrets.SystemRandom()

    def generate(self, length: Optional[int] = None) -> str:
        """
        Generate a random password with mixed character classes.

        Args:
            length: Password length (15 to 100, default 20)

        Returns:
            Password with at least one lowercase, uppercase, digit and special char

        Raises:
            PasswordGenerationError: If the length is out of range
        """
        if length is None:
            length = self.DEFAULT_PASSWORD_LENGTH

        if not self.MIN_PASSWORD_LENGTH <= length <= self.MAX_PASSWORD_LENGTH:
            raise PasswordGenerationError(
                f"Password length must be between {self.MIN_PASSWORD_LENGTH} "
                f"and {self.MAX_PASSWORD_LENGTH} characters"
            )

        # At least one from each category
        password_chars = [
            secrets.choice(string.ascii_lowercase),
            secrets.choice(string.ascii_uppercase),
            secrets.choice(string.digits),
            secrets.choice(self.SPECIAL_CHARS),
        ]
        password_chars += [secrets.choice(self.PASSWORD_CHARSET) for _ in range(length - 4)]
        self._random.shuffle(password_chars)

        logger.debug(f"Generated one-time password of length {length}")
        return ''.join(password_chars)


# Global instance
password_generator = PasswordGenerator()
