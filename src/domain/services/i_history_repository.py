#src/domain/services/i_history_repository.py

"""
History repository interface for persisted translations.
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from src.domain.common.result import Result
from src.domain.models.history_entry import ExportFormat, HistoryEntry, HistoryFilters, HistoryStats


class IHistoryRepository(ABC):
    """
    Interface for the translation history store.

    Entries are returned newest first.
    """

    @abstractmethod
    def add(self, entry: HistoryEntry) -> Result[HistoryEntry]:
        pass

    @abstractmethod
    def get_all(self, filters: Optional[HistoryFilters] = None) -> Result[List[HistoryEntry]]:
        """
        Query entries.

        Args:
            filters: Optional search text, date range, source language,
                minimum confidence and paging

        Returns:
            Result containing matching entries, newest first
        """
        pass

    @abstractmethod
    def get_by_id(self, entry_id: str) -> Result[Optional[HistoryEntry]]:
        pass

    @abstractmethod
    def update(self, entry_id: str, **fields) -> Result[bool]:
        """
        Update the given fields of an entry.

        Returns:
            Result.ok(True) if the entry existed, Result.ok(False) otherwise
        """
        pass

    @abstractmethod
    def delete(self, entry_id: str) -> Result[bool]:
        pass

    @abstractmethod
    def clear(self) -> Result[int]:
        """Delete every entry; returns the number removed."""
        pass

    @abstractmethod
    def get_stats(self) -> Result[HistoryStats]:
        pass

    @abstractmethod
    def export(self, export_format: ExportFormat, directory: Optional[str] = None) -> Result[str]:
        """
        Export all entries to a file.

        Args:
            export_format: JSON or CSV
            directory: Target directory (defaults to the user's home)

        Returns:
            Result containing the path of the written file
        """
        pass

    @abstractmethod
    def close(self) -> None:
        pass
