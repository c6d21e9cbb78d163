# src/infrastructure/history/sql_models.py
from sqlalchemy import BigInteger, Column, Float, Index, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class TranslationModel(Base):
    __tablename__ = "translations"

    id = Column(String(64), primary_key=True)
    timestamp = Column(BigInteger, nullable=False)  # epoch milliseconds

    source_text = Column(Text, nullable=False)
    translated_text = Column(Text, nullable=False)
    source_language = Column(String(16), nullable=False)
    target_language = Column(String(16), nullable=False)

    confidence = Column(Float, nullable=False, default=0.0)
    image_data = Column(Text, nullable=True)  # base64 PNG

    __table_args__ = (
        Index("idx_translations_timestamp", "timestamp"),
        Index("idx_translations_source_text", "source_text"),
        Index("idx_translations_translated_text", "translated_text"),
        Index("idx_translations_source_language", "source_language"),
    )
