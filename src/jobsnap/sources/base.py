from abc import ABC, abstractmethod

from pydantic import BaseModel

from jobsnap.models import JobRecord


class PageInput(BaseModel):
    """A captured job page and the caller-supplied context for parsing it."""

    html: str = ""
    url: str | None = None
    job_id: str | None = None
    saved_at: str | None = None


class BaseSource(ABC):
    """
    Abstract base class for the independent extractors of a job page.
    """

    name: str = "base"

    @abstractmethod
    def parse(self, page: PageInput) -> JobRecord | None:
        """
        Build a (possibly sparse) JobRecord from the page, or None when this
        source has nothing to offer for it.
        """
        pass
