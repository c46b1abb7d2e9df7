from typing import Any, Mapping

from markgraph.doc_store import Database, DocCollection
from markgraph.domain.post import PostDoc, PostOptions
from markgraph.errors import BadValuesError, NotFoundError, WrongUserError

NEWEST_FIRST = [("date_created", -1)]


class PostAuthorNotMatchError(WrongUserError):
    def __init__(self, author: str, post_id: str) -> None:
        self.author = author
        self.post_id = post_id
        super().__init__("{0} is not the author of post {1}!", author, post_id)


def _options(options: PostOptions | Mapping[str, Any] | None) -> dict | None:
    if options is None:
        return None
    try:
        return PostOptions.model_validate(options).model_dump()
    except ValueError as e:
        raise BadValuesError("Invalid post options!") from e


class PostingConcept:
    """Status posts written by users plus the activity log of bookmark changes."""

    def __init__(self, db: Database, collection_name: str = "posts") -> None:
        self.posts = DocCollection(db, collection_name, PostDoc)

    def create(
        self,
        author: str,
        content: str | None,
        options: PostOptions | Mapping[str, Any] | None = None,
    ) -> dict:
        if not content:
            raise BadValuesError("Post content must be non-empty!")
        post = {"author": author, "content": content, "kind": "status"}
        if (opts := _options(options)) is not None:
            post["options"] = opts
        post_id = self.posts.create_one(post)
        return {"msg": "Post successfully created!", "post": self.posts.read_one({"id": post_id})}

    def log_activity(self, author: str, content: str) -> str:
        """Record an activity entry on behalf of ``author`` and return its ID."""
        return self.posts.create_one(
            {
                "author": author,
                "content": content,
                "kind": "activity",
                "options": PostOptions(visibility="friends").model_dump(),
            }
        )

    def get_posts(self) -> list[PostDoc]:
        return self.posts.read_many({}, sort=NEWEST_FIRST)

    def get_by_author(self, author: str) -> list[PostDoc]:
        return self.posts.read_many({"author": author}, sort=NEWEST_FIRST)

    def get_by_id(self, post_id: str) -> PostDoc:
        post = self.posts.read_one({"id": post_id})
        if post is None:
            raise NotFoundError("Post {0} does not exist!", post_id)
        return post

    def update(
        self,
        post_id: str,
        content: str | None = None,
        options: PostOptions | Mapping[str, Any] | None = None,
    ) -> dict:
        update: dict[str, Any] = {}
        if content is not None:
            update["content"] = content
        if (opts := _options(options)) is not None:
            update["options"] = opts
        if update:
            self.posts.partial_update_one({"id": post_id}, update)
        return {"msg": "Post successfully updated!"}

    def delete(self, post_id: str) -> dict:
        self.posts.delete_one({"id": post_id})
        return {"msg": "Post deleted successfully!"}

    def assert_author_is_user(self, post_id: str, user: str) -> None:
        post = self.get_by_id(post_id)
        if post.author != user:
            raise PostAuthorNotMatchError(user, post_id)
