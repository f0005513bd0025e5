from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class Story(Base):
    __tablename__ = "stories"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False, index=True)
    alternative_title = Column(String(255), nullable=False, default="")
    cover_image = Column(String(500), nullable=False, default="")
    author_id = Column(Integer, ForeignKey("authors.id", ondelete="SET NULL"), nullable=True)
    group_id = Column(Integer, ForeignKey("translation_groups.id", ondelete="SET NULL"), nullable=True)
    release_year = Column(Integer, nullable=True)
    description = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    author = relationship("Author", back_populates="stories")
    group = relationship("TranslationGroup", back_populates="stories")
    genre_links = relationship("StoryGenre", back_populates="story", cascade="all, delete-orphan")
    chapters = relationship(
        "Chapter",
        back_populates="story",
        cascade="all, delete-orphan",
        order_by="Chapter.chapter_number.desc()",
    )
    comments = relationship("Comment", back_populates="story", cascade="all, delete-orphan")
    favorites = relationship("Favorite", cascade="all, delete-orphan")
    reading_histories = relationship("ReadingHistory", cascade="all, delete-orphan")

    @property
    def genres(self) -> list:
        return [link.genre for link in self.genre_links]


class StoryGenre(Base):
    __tablename__ = "story_genres"

    id = Column(Integer, primary_key=True, index=True)
    story_id = Column(Integer, ForeignKey("stories.id", ondelete="CASCADE"), nullable=False)
    genre_id = Column(Integer, ForeignKey("genres.id", ondelete="CASCADE"), nullable=False)

    story = relationship("Story", back_populates="genre_links")
    genre = relationship("Genre", back_populates="story_links")

    __table_args__ = (UniqueConstraint("story_id", "genre_id", name="uq_story_genre"),)
