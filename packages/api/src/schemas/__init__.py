# This project was developed with assistance from AI tools.
"""Schema components shared by lead and condition responses."""

from pydantic import BaseModel


class Pagination(BaseModel):
    """Offset-based pagination metadata for list responses."""

    total: int
    offset: int
    limit: int
    has_more: bool

    @classmethod
    def complete(cls, count: int) -> "Pagination":
        """Metadata for a list returned whole, e.g. every condition on one lead."""
        return cls(total=count, offset=0, limit=count, has_more=False)
