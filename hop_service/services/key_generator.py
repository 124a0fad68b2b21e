"""
Key generation strategies for the link shortener.
Uses Strategy Pattern so the creation service can be handed any generator.
"""

import secrets
import string
from abc import ABC, abstractmethod


KEY_LENGTH = 7
KEY_ALPHABET = string.ascii_letters


class KeyGenerator(ABC):
    """Abstract base class for key generation strategies"""

    @abstractmethod
    def generate(self) -> str:
        """
        Generate a candidate key.

        Uniqueness is NOT guaranteed here: the store's unique index
        rejects duplicates and the caller retries with a fresh key.

        Returns:
            A candidate key string
        """
        pass


class SecureRandomKeyGenerator(KeyGenerator):
    """
    Random alphabetic keys drawn from a cryptographically secure source.

    Pros: Unpredictable, no coordination between instances
    Cons: Collisions are possible (52^7 keyspace), resolved by retrying
    """

    def __init__(self, length: int = KEY_LENGTH):
        if length < 1:
            raise ValueError(f"Key length must be positive, got {length}")
        self.length = length
        self.characters = KEY_ALPHABET

    def generate(self) -> str:
        """Generate a random key of the configured length"""
        return ''.join(secrets.choice(self.characters) for _ in range(self.length))
