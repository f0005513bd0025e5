from app.models.author import Author
from app.models.chapter import Chapter
from app.models.comment import Comment
from app.models.favorite import Favorite
from app.models.genre import Genre
from app.models.reading_history import ReadingHistory
from app.models.report import Report
from app.models.story import Story, StoryGenre
from app.models.translation_group import TranslationGroup
from app.models.user import User

__all__ = [
    "Author",
    "Chapter",
    "Comment",
    "Favorite",
    "Genre",
    "ReadingHistory",
    "Report",
    "Story",
    "StoryGenre",
    "TranslationGroup",
    "User",
]
