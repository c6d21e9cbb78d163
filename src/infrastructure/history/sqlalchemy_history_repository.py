# src/infrastructure/history/sqlalchemy_history_repository.py
"""
SQLAlchemy implementation of the translation history store.

SQLite is the default backend; any SQLAlchemy URL works.
"""
import csv
import json
import os
from typing import List, Optional

from sqlalchemy import create_engine, func
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from src.domain.common.errors import HistoryError, ValidationError
from src.domain.common.result import Result
from src.domain.models.history_entry import ExportFormat, HistoryEntry, HistoryFilters, HistoryStats
from src.domain.models.translation_result import now_ms
from src.domain.services.i_history_repository import IHistoryRepository
from src.domain.services.i_logger_service import ILoggerService
from src.infrastructure.history.sql_models import Base, TranslationModel

CSV_HEADERS = ['ID', 'Timestamp', 'Source Text', 'Translated Text',
               'Source Language', 'Target Language', 'Confidence']
UPDATABLE_FIELDS = {'source_text', 'translated_text', 'source_language',
                    'target_language', 'confidence', 'image_data'}


def _to_entry(row: TranslationModel) -> HistoryEntry:
    return HistoryEntry(
        id=row.id,
        timestamp=row.timestamp,
        source_text=row.source_text,
        translated_text=row.translated_text,
        source_language=row.source_language,
        target_language=row.target_language,
        confidence=row.confidence,
        image_data=row.image_data,
    )


class SqlAlchemyHistoryRepository(IHistoryRepository):
    """
    History repository backed by a SQLAlchemy engine.

    Tables are created on construction. Each operation uses its own session,
    so the repository may be called from worker threads.
    """

    def __init__(self, database_url: str, logger: ILoggerService):
        self.logger = logger
        self.database_url = database_url

        connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
        engine_kwargs = {}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection, otherwise every session sees a fresh empty database
            engine_kwargs["poolclass"] = StaticPool

        self.engine = create_engine(database_url, echo=False, connect_args=connect_args, **engine_kwargs)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        Base.metadata.create_all(bind=self.engine)

        self.logger.info("History database initialized", url=self.engine.url.render_as_string(hide_password=True))

    def add(self, entry: HistoryEntry) -> Result[HistoryEntry]:
        with self.SessionLocal() as db:
            try:
                db.add(TranslationModel(**entry.to_dict()))
                db.commit()
            except Exception as e:
                db.rollback()
                return self._fail("Failed to add history entry", e, entry_id=entry.id)

        self.logger.debug("History entry added", entry_id=entry.id)
        return Result.ok(entry)

    def get_all(self, filters: Optional[HistoryFilters] = None) -> Result[List[HistoryEntry]]:
        filters = filters or HistoryFilters()
        with self.SessionLocal() as db:
            try:
                query = db.query(TranslationModel)

                if filters.search:
                    term = f"%{filters.search}%"
                    query = query.filter(TranslationModel.source_text.like(term)
                                         | TranslationModel.translated_text.like(term))
                if filters.date_from is not None:
                    query = query.filter(TranslationModel.timestamp >= filters.date_from)
                if filters.date_to is not None:
                    query = query.filter(TranslationModel.timestamp <= filters.date_to)
                if filters.source_language:
                    query = query.filter(TranslationModel.source_language == filters.source_language)
                if filters.min_confidence is not None:
                    query = query.filter(TranslationModel.confidence >= filters.min_confidence)

                query = query.order_by(TranslationModel.timestamp.desc())
                if filters.limit:
                    query = query.limit(filters.limit)
                if filters.offset:
                    query = query.offset(filters.offset)

                return Result.ok([_to_entry(row) for row in query.all()])
            except Exception as e:
                return self._fail("Failed to query history", e)

    def get_by_id(self, entry_id: str) -> Result[Optional[HistoryEntry]]:
        with self.SessionLocal() as db:
            try:
                row = db.get(TranslationModel, entry_id)
                return Result.ok(_to_entry(row) if row else None)
            except Exception as e:
                return self._fail("Failed to read history entry", e, entry_id=entry_id)

    def update(self, entry_id: str, **fields) -> Result[bool]:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            return Result.fail(ValidationError(
                f"Cannot update fields: {', '.join(sorted(unknown))}",
                details={"entry_id": entry_id}
            ))

        with self.SessionLocal() as db:
            try:
                row = db.get(TranslationModel, entry_id)
                if row is None:
                    return Result.ok(False)
                for name, value in fields.items():
                    setattr(row, name, value)
                db.commit()
                return Result.ok(True)
            except Exception as e:
                db.rollback()
                return self._fail("Failed to update history entry", e, entry_id=entry_id)

    def delete(self, entry_id: str) -> Result[bool]:
        with self.SessionLocal() as db:
            try:
                deleted = db.query(TranslationModel).filter(TranslationModel.id == entry_id).delete()
                db.commit()
                return Result.ok(deleted > 0)
            except Exception as e:
                db.rollback()
                return self._fail("Failed to delete history entry", e, entry_id=entry_id)

    def clear(self) -> Result[int]:
        with self.SessionLocal() as db:
            try:
                deleted = db.query(TranslationModel).delete()
                db.commit()
            except Exception as e:
                db.rollback()
                return self._fail("Failed to clear history", e)

        self.logger.info("History cleared", deleted=deleted)
        return Result.ok(deleted)

    def get_stats(self) -> Result[HistoryStats]:
        with self.SessionLocal() as db:
            try:
                total = db.query(func.count(TranslationModel.id)).scalar() or 0
                unique_languages = db.query(
                    func.count(func.distinct(TranslationModel.source_language))
                ).scalar() or 0
                avg_confidence = db.query(func.avg(TranslationModel.confidence)).scalar() or 0.0

                count_column = func.count(TranslationModel.id).label("count")
                common = (
                    db.query(TranslationModel.source_language, count_column)
                    .group_by(TranslationModel.source_language)
                    .order_by(count_column.desc())
                    .limit(5)
                    .all()
                )
            except Exception as e:
                return self._fail("Failed to compute history stats", e)

        return Result.ok(HistoryStats(
            total_count=total,
            unique_languages=unique_languages,
            avg_confidence=float(avg_confidence),
            most_common_languages=[(language, count) for language, count in common],
        ))

    def export(self, export_format: ExportFormat, directory: Optional[str] = None) -> Result[str]:
        entries_result = self.get_all()
        if entries_result.is_failure:
            return entries_result

        directory = directory or os.path.expanduser("~")
        path = os.path.join(directory, f"history_export_{now_ms()}.{export_format.value}")

        try:
            os.makedirs(directory, exist_ok=True)
            if export_format == ExportFormat.JSON:
                with open(path, "w", encoding="utf-8") as f:
                    json.dump([entry.to_dict() for entry in entries_result.value], f,
                              ensure_ascii=False, indent=2)
            else:
                with open(path, "w", encoding="utf-8", newline="") as f:
                    writer = csv.writer(f)
                    writer.writerow(CSV_HEADERS)
                    for entry in entries_result.value:
                        writer.writerow([entry.id, entry.timestamp, entry.source_text, entry.translated_text,
                                         entry.source_language, entry.target_language, entry.confidence])
        except OSError as e:
            return self._fail("Failed to export history", e, path=path)

        self.logger.info("History exported", path=path, format=export_format.value)
        return Result.ok(path)

    def close(self) -> None:
        self.engine.dispose()

    def _fail(self, message: str, e: Exception, **details) -> Result:
        error = HistoryError(f"{message}: {e}", details=details, inner_error=e)
        self.logger.error(str(error))
        return Result.fail(error)
