import uuid
from datetime import date

from sqlalchemy import Column, Date, String, Text, Uuid
from hop_service.config import settings
from hop_service.database.connection import Base


class Link(Base):
    """
    Mapping from a short key to the original long URL.

    Rows are written once by the creation service and never updated or
    deleted. The unique index on ``key`` is what detects collisions:
    the service never checks for an existing key before inserting.
    """
    __tablename__ = "links"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    # unique=True + index=True creates the unique index ix_links_key
    key = Column(String(settings.key_length), unique=True, nullable=False, index=True)
    url = Column("long_url", Text, nullable=False)
    created_at = Column(Date, nullable=False, default=date.today)

    def __repr__(self) -> str:
        return f"<Link key={self.key!r} url={self.url!r}>"
