"""Abstract capabilities the reconciler depends on."""

from abc import ABC, abstractmethod

from ..core.models import ResultLink


class StoreError(Exception):
    """The result store could not be opened."""


class FileLister(ABC):
    @abstractmethod
    def list_files(self, year: int) -> list[str]:
        """Return the names of the HR result files in production for year.

        One simple file name per entry, no line terminators.
        """
        pass


class ResultStore(ABC):
    @abstractmethod
    def find_installed(self, file_fragment: str, year: int) -> list[dict]:
        """Return results_ow rows whose results_file contains file_fragment
        (case-sensitive) and whose event_date is in year."""
        pass

    @abstractmethod
    def find_event_titles(self, keyword: str) -> list[dict]:
        """Return non-obsolete open water event_titles rows whose title
        contains keyword (case-sensitive)."""
        pass

    @abstractmethod
    def insert_result(self, link: ResultLink):
        """Insert one results_ow row."""
        pass

    def close(self):
        """Release the connection, if any."""
        pass
