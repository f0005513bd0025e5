"""
Comment queries and two-level threading.

Comments nest one level deep: a top-level comment (parent_id NULL) and its
direct replies. ``thread_comments`` groups a flat list into that shape.
"""

from sqlalchemy.orm import Session, joinedload

from app.models.chapter import Chapter
from app.models.comment import Comment
from app.services.errors import InvalidParentCommentError


def thread_comments(comments: list) -> list[dict]:
    """Group a flat comment list into top-level entries with ``replies``.

    Accepts ORM rows or plain dicts. Top-level entries and each entry's
    replies keep their input order. A reply whose parent is itself a reply
    has no top-level ancestor in this scheme and is left out of the result.
    """
    rows = [_as_dict(c) for c in comments]
    replies_by_parent: dict[int, list[dict]] = {}
    for row in rows:
        if row.get("parent_id") is not None:
            replies_by_parent.setdefault(row["parent_id"], []).append(row)

    return [
        {**row, "replies": replies_by_parent.get(row["id"], [])}
        for row in rows
        if row.get("parent_id") is None
    ]


def _as_dict(comment) -> dict:
    if isinstance(comment, dict):
        return dict(comment)
    return {
        "id": comment.id,
        "user_id": comment.user_id,
        "story_id": comment.story_id,
        "chapter_id": comment.chapter_id,
        "parent_id": comment.parent_id,
        "content": comment.content,
        "created_at": comment.created_at,
        "user": comment.user,
    }


def list_story_comments(db: Session, story_id: int) -> list[Comment]:
    """Story-level comments only (not attached to a chapter), newest first."""
    return (
        db.query(Comment)
        .options(joinedload(Comment.user))
        .filter(Comment.story_id == story_id, Comment.chapter_id.is_(None))
        .order_by(Comment.created_at.desc(), Comment.id.desc())
        .all()
    )


def list_chapter_comments(db: Session, chapter_id: int) -> list[Comment]:
    return (
        db.query(Comment)
        .options(joinedload(Comment.user))
        .filter(Comment.chapter_id == chapter_id)
        .order_by(Comment.created_at.desc(), Comment.id.desc())
        .all()
    )


def create_comment(
    db: Session,
    user_id: int,
    story_id: int,
    content: str,
    chapter_id: int | None = None,
    parent_id: int | None = None,
) -> Comment:
    """Insert a comment. The story is assumed to exist; callers check it.

    Raises ValueError if the chapter is not part of the story and
    InvalidParentCommentError if the parent cannot take replies.
    """
    if not content.strip():
        raise ValueError("Comment cannot be empty")

    if chapter_id is not None:
        chapter = db.query(Chapter).filter(Chapter.id == chapter_id).first()
        if chapter is None or chapter.story_id != story_id:
            raise ValueError("Chapter does not belong to this story")

    if parent_id is not None:
        parent = db.query(Comment).filter(Comment.id == parent_id).first()
        if parent is None or parent.story_id != story_id:
            raise InvalidParentCommentError("Parent comment not found on this story")
        if parent.parent_id is not None:
            raise InvalidParentCommentError("Replies can only be made to top-level comments")
        if parent.chapter_id != chapter_id:
            raise InvalidParentCommentError("Reply must be posted in the same thread as its parent")

    comment = Comment(
        user_id=user_id,
        story_id=story_id,
        chapter_id=chapter_id,
        parent_id=parent_id,
        content=content.strip(),
    )
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return comment
