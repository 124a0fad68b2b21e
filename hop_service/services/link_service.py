import logging
from typing import Optional

from pydantic import AnyUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError, MultipleResultsFound, SQLAlchemyError
from sqlalchemy.orm import Session

from hop_service.cache.accessor import CacheAsideAccessor
from hop_service.config import settings
from hop_service.exceptions import (
    KeyGenerationExhaustedError,
    StoreConsistencyError,
    ValidationError,
)
from hop_service.models.link import Link
from hop_service.services.key_generator import KeyGenerator, SecureRandomKeyGenerator
from hop_service.services.retry import AttemptOutcome, KeyAttempts

logger = logging.getLogger(__name__)

_url_adapter = TypeAdapter(AnyUrl)


def validate_url(url: str) -> str:
    """
    Check that ``url`` is a non-empty absolute URL with a scheme and a host.

    Returns the URL unchanged so it is stored exactly as submitted.

    Raises:
        ValidationError: the URL is empty or malformed
    """
    if not url or not url.strip():
        raise ValidationError("URL must not be empty.")
    if url != url.strip():
        raise ValidationError("URL must not have leading or trailing whitespace.")

    try:
        parsed = _url_adapter.validate_python(url)
    except PydanticValidationError as e:
        raise ValidationError(f"{url} is not a valid URL.") from e

    if not parsed.host:
        raise ValidationError(f"{url} is not a valid URL.")

    return url


class LinkService:
    """
    Link creation and lookup with dependency injection for the cache.

    - Database session is the source of truth
    - Cache accessor is optional and best-effort
    - Key generator is injected so collisions can be exercised in tests
    """

    def __init__(
        self,
        db: Session,
        cache: Optional[CacheAsideAccessor] = None,
        key_generator: Optional[KeyGenerator] = None,
        max_attempts: Optional[int] = None,
    ):
        """
        Initialize link service with dependencies.

        Args:
            db: Database session
            cache: Cache-aside accessor (optional, for performance)
            key_generator: Key strategy (defaults to secure random keys)
            max_attempts: Insert attempts per create (defaults to settings)
        """
        self.db = db
        self.cache = cache or CacheAsideAccessor(None)
        self.key_generator = key_generator or SecureRandomKeyGenerator(settings.key_length)
        self.max_attempts = max_attempts or settings.max_key_attempts

    async def create(self, url: str) -> Link:
        """Create a new link for ``url``

        Process:
        1. Validate the URL (no write on failure)
        2. Insert with a fresh key; the unique index rejects collisions
        3. On a store error roll back and retry, up to max_attempts
        4. Schedule the cache write (not awaited) and return

        Raises:
            ValidationError: malformed URL
            KeyGenerationExhaustedError: every attempt failed
        """
        validate_url(url)

        attempts = KeyAttempts(self.max_attempts)
        while True:
            link = Link(key=self.key_generator.generate(), url=url)
            self.db.add(link)
            try:
                self.db.commit()
            except IntegrityError as e:
                self.db.rollback()
                logger.debug("Key %s already taken, retrying", link.key)
                outcome = attempts.record_failure(e)
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.warning("Store error while inserting key %s: %s", link.key, e)
                outcome = attempts.record_failure(e)
            else:
                attempts.record_success()
                break

            if outcome is AttemptOutcome.EXHAUSTED:
                logger.error(
                    "Giving up on %s after %d attempts: %s",
                    url, attempts.attempt, attempts.last_error,
                )
                raise KeyGenerationExhaustedError(attempts.attempt) from attempts.last_error

        self.db.refresh(link)
        logger.info("Generated %s for %s.", link.key, link.url)

        # Fire and forget: the response depends on the database write only
        self.cache.populate(link.key, link.url)
        return link

    async def find(self, key: str) -> Optional[Link]:
        """Get the link stored under ``key``, or None

        The key is matched exactly, without normalization.

        Raises:
            StoreConsistencyError: more than one row shares the key
        """
        try:
            return self.db.query(Link).filter(Link.key == key).one_or_none()
        except MultipleResultsFound as e:
            logger.error("Store returned several links for key %s", key)
            raise StoreConsistencyError(f"Duplicate rows for key {key}.") from e

    async def resolve(self, key: str) -> Optional[str]:
        """
        Get the long URL for redirection using Cache-Aside pattern.

        Flow:
        1. Check cache first (any cache problem counts as a miss)
        2. On miss, query database
        3. Return long URL, or None

        The cache is never filled from here: only create() populates it.
        """
        cached_url = await self.cache.get(key)
        if cached_url is not None:
            logger.info("Cache hit for %s.", key)
            return cached_url

        link = await self.find(key)
        if link is None:
            return None
        return link.url
