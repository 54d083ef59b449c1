"""
Username and password generation for new panel lines
"""

import random
import re
import string
from datetime import date
from typing import Optional


class CredentialGenerator:
    """Derives line usernames from customer names and generates passwords"""

    PASSWORD_ALPHABET = string.ascii_letters + string.digits
    PASSWORD_LENGTH = 10

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def generate_username(self, customer_name: str, year: Optional[int] = None) -> str:
        """Lowercase the name, drop everything outside a-z and append the year.

        "Jane Doe" in 2026 -> "janedoe2026". Collisions are not checked here;
        the panel reports them after submit.
        """
        year = year or date.today().year
        clean = re.sub(r"[^a-z]", "", customer_name.lower())
        return f"{clean}{year}"

    def generate_password(self, length: int = PASSWORD_LENGTH) -> str:
        """Random alphanumeric password"""
        return "".join(self.rng.choice(self.PASSWORD_ALPHABET) for _ in range(length))

    def alternate_username(self, username: str) -> str:
        """Suggestion to retry with when the panel rejects a username"""
        return f"{username}{self.rng.randint(0, 999)}"

