"""Domain errors raised by services and repositories.

The API layer maps these onto HTTP responses in ``app.main``.
"""


class DuplicateFavoriteError(Exception):
    def __init__(self, user_id: int, story_id: int):
        super().__init__(f"Story {story_id} is already in favorites")
        self.user_id = user_id
        self.story_id = story_id


class InvalidParentCommentError(ValueError):
    """A reply must target an existing top-level comment on the same story."""
