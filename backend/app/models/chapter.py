from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base

CHAPTER_NOVEL = "novel"
CHAPTER_ONESHOT = "oneshot"
CHAPTER_COMIC = "comic"
CHAPTER_TYPES = (CHAPTER_NOVEL, CHAPTER_ONESHOT, CHAPTER_COMIC)
# Image-based chapters render `images`; novels render `content` in `font_family`.
IMAGE_CHAPTER_TYPES = (CHAPTER_ONESHOT, CHAPTER_COMIC)


class Chapter(Base):
    __tablename__ = "chapters"

    id = Column(Integer, primary_key=True, index=True)
    story_id = Column(Integer, ForeignKey("stories.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False, default="")
    chapter_type = Column(String(20), nullable=False, default=CHAPTER_NOVEL)
    images = Column(JSON, nullable=False, default=list)
    font_family = Column(String(100), nullable=False, default="Arial, sans-serif")
    chapter_number = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    story = relationship("Story", back_populates="chapters")
    comments = relationship("Comment", back_populates="chapter", cascade="all, delete-orphan")
    reading_histories = relationship("ReadingHistory", cascade="all, delete-orphan")

    __table_args__ = (UniqueConstraint("story_id", "chapter_number", name="uq_chapter_story_number"),)
