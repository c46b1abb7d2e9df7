"""Web server routes. Each handler synchronizes one or more concepts.

Multi-step handlers (creating a webapp also creates its graph node and an
activity post) are not atomic: a failure halfway leaves the earlier steps in
place.
"""

from typing import Any

from markgraph.api.router import Route, Router
from markgraph.api.validators import (
    Credentials,
    PasswordPatch,
    PostCreate,
    PostPatch,
    PostsQuery,
    TagsBody,
    TopTagsQuery,
    UsernameParams,
    WebappCreate,
    WebappPatch,
    WebappRef,
    split_tags,
)
from markgraph.concepts import (
    AuthenticatingConcept,
    FriendingConcept,
    GraphingConcept,
    PostingConcept,
    SessioningConcept,
    TaggingConcept,
    WebappingConcept,
)
from markgraph.concepts.friending import (
    AlreadyFriendsError,
    FriendNotFoundError,
    FriendRequestAlreadyExistsError,
    FriendRequestNotFoundError,
)
from markgraph.concepts.posting import PostAuthorNotMatchError
from markgraph.concepts.sessioning import Session
from markgraph.concepts.webapping import WebappOwnerNotMatchError
from markgraph.graph_maintenance import GraphMaintainer


class Routes:
    def __init__(
        self,
        *,
        authing: AuthenticatingConcept,
        sessioning: SessioningConcept,
        webapping: WebappingConcept,
        tagging: TaggingConcept,
        graphing: GraphingConcept,
        posting: PostingConcept,
        friending: FriendingConcept,
        top_tags_limit: int = 5,
    ) -> None:
        self.authing = authing
        self.sessioning = sessioning
        self.webapping = webapping
        self.tagging = tagging
        self.graphing = graphing
        self.posting = posting
        self.friending = friending
        self.top_tags_limit = top_tags_limit
        self.graph_maintainer = GraphMaintainer(
            webapping=webapping, tagging=tagging, graphing=graphing
        )

    def get_status(self) -> dict:
        return {"msg": "Server is running!"}

    # Users and sessions

    def get_session_user(self, session: Session):
        user = self.sessioning.get_user(session)
        return self.authing.get_user_by_id(user)

    def get_users(self):
        return self.authing.get_users()

    def get_user(self, username: str):
        return self.authing.get_user_by_username(username)

    def create_user(self, session: Session, username: str, password: str):
        self.sessioning.is_logged_out(session)
        return self.authing.create(username, password)

    def update_username(self, session: Session, username: str):
        user = self.sessioning.get_user(session)
        return self.authing.update_username(user, username)

    def update_password(self, session: Session, current_password: str, new_password: str):
        user = self.sessioning.get_user(session)
        return self.authing.update_password(user, current_password, new_password)

    def delete_user(self, session: Session):
        user = self.sessioning.get_user(session)
        self.sessioning.end(session)
        return self.authing.delete(user)

    def log_in(self, session: Session, username: str, password: str):
        authenticated = self.authing.authenticate(username, password)
        self.sessioning.start(session, authenticated["id"])
        return {"msg": "Logged in!"}

    def log_out(self, session: Session):
        self.sessioning.end(session)
        return {"msg": "Logged out!"}

    # Posts

    def get_posts(self, author: str | None = None):
        if author:
            author_id = self.authing.get_user_by_username(author).id
            return self.posting.get_by_author(author_id)
        return self.posting.get_posts()

    def create_post(self, session: Session, content: str, options: Any = None):
        user = self.sessioning.get_user(session)
        return self.posting.create(user, content, options)

    def update_post(
        self, session: Session, post_id: str, content: str | None = None, options: Any = None
    ):
        user = self.sessioning.get_user(session)
        self.posting.assert_author_is_user(post_id, user)
        return self.posting.update(post_id, content, options)

    def delete_post(self, session: Session, post_id: str):
        user = self.sessioning.get_user(session)
        self.posting.assert_author_is_user(post_id, user)
        return self.posting.delete(post_id)

    # Friends

    def get_friends(self, session: Session):
        user = self.sessioning.get_user(session)
        return self.authing.ids_to_usernames(self.friending.get_friends(user))

    def remove_friend(self, session: Session, friend: str):
        user = self.sessioning.get_user(session)
        friend_id = self.authing.get_user_by_username(friend).id
        return self.friending.remove_friend(user, friend_id)

    def get_friend_requests(self, session: Session):
        user = self.sessioning.get_user(session)
        return self.friending.get_requests(user)

    def send_friend_request(self, session: Session, to: str):
        user = self.sessioning.get_user(session)
        to_id = self.authing.get_user_by_username(to).id
        return self.friending.send_request(user, to_id)

    def remove_friend_request(self, session: Session, to: str):
        user = self.sessioning.get_user(session)
        to_id = self.authing.get_user_by_username(to).id
        return self.friending.remove_request(user, to_id)

    def accept_friend_request(self, session: Session, sender: str):
        user = self.sessioning.get_user(session)
        sender_id = self.authing.get_user_by_username(sender).id
        return self.friending.accept_request(sender_id, user)

    def reject_friend_request(self, session: Session, sender: str):
        user = self.sessioning.get_user(session)
        sender_id = self.authing.get_user_by_username(sender).id
        return self.friending.reject_request(sender_id, user)

    # Webapps

    def add_webapp(self, session: Session, name: str, description: str, url: str):
        user = self.sessioning.get_user(session)
        created = self.webapping.create(user, name, description, url)
        self.graphing.add_node(created["id"], user)
        self.posting.log_activity(user, f"Added webapp {name} ({url})")
        return created

    def view_all_webapps(self, session: Session):
        user = self.sessioning.get_user(session)
        return self.webapping.get_by_user(user)

    def delete_webapp(self, session: Session, webapp_id: str):
        user = self.sessioning.get_user(session)
        self.webapping.assert_owner_is_user(webapp_id, user)
        webapp = self.webapping.get_by_id(webapp_id)
        deleted = self.webapping.delete(webapp_id)
        self.tagging.delete(webapp_id)
        self.graphing.delete_node(webapp_id)
        self.posting.log_activity(user, f"Removed webapp {webapp.name}")
        return deleted

    def patch_webapp(
        self,
        session: Session,
        webapp_id: str,
        name: str | None = None,
        description: str | None = None,
        url: str | None = None,
    ):
        user = self.sessioning.get_user(session)
        self.webapping.assert_owner_is_user(webapp_id, user)
        updated = self.webapping.update(webapp_id, name=name, description=description, url=url)
        webapp = self.webapping.get_by_id(webapp_id)
        self.posting.log_activity(user, f"Updated webapp {webapp.name}")
        return updated

    # Tags

    def add_tags_to_webapp(self, session: Session, webapp_id: str, tags: list[str]):
        user = self.sessioning.get_user(session)
        self.webapping.assert_owner_is_user(webapp_id, user)
        result = self.tagging.add_tags(webapp_id, split_tags(tags))
        self.graph_maintainer.refresh_item(user, webapp_id)
        return result

    def delete_tags_from_webapp(self, session: Session, webapp_id: str, tags: list[str]):
        user = self.sessioning.get_user(session)
        self.webapping.assert_owner_is_user(webapp_id, user)
        result = self.tagging.delete_tags(webapp_id, split_tags(tags))
        self.graph_maintainer.refresh_item(user, webapp_id)
        return result

    def view_tags_for_webapp(self, session: Session, webapp_id: str):
        self.sessioning.get_user(session)
        self.webapping.get_by_id(webapp_id)
        return self.tagging.get_tags_for_id(webapp_id)

    def filter_webapps_by_tag(self, session: Session, tag: str):
        user = self.sessioning.get_user(session)
        webapps = self.webapping.get_by_user(user)
        tagged = set(self.tagging.get_items_with_tag(tag, [w.id for w in webapps]))
        return [webapp for webapp in webapps if webapp.id in tagged]

    def top_tags(self, session: Session, limit: int | None = None):
        user = self.sessioning.get_user(session)
        webapps = self.webapping.get_by_user(user)
        return self.tagging.top_tags_for_items(
            [w.id for w in webapps], limit or self.top_tags_limit
        )

    # Graph

    def get_graph(self, session: Session):
        user = self.sessioning.get_user(session)
        return self.graphing.get_user_nodes(user)

    def get_webapp_neighbors(self, session: Session, webapp_id: str):
        user = self.sessioning.get_user(session)
        self.webapping.assert_owner_is_user(webapp_id, user)
        neighbors = set(self.graphing.get_neighbors(webapp_id))
        return [w for w in self.webapping.get_by_user(user) if w.id in neighbors]

    def rebuild_graph(self, session: Session):
        user = self.sessioning.get_user(session)
        return self.graph_maintainer.rebuild_user(user)


def route_table(routes: Routes) -> list[Route]:
    return [
        Route("GET", "/status", routes.get_status),
        Route("GET", "/session", routes.get_session_user),
        Route("GET", "/users", routes.get_users),
        Route("GET", "/users/{username}", routes.get_user, UsernameParams),
        Route("POST", "/users", routes.create_user, Credentials),
        Route("PATCH", "/users/username", routes.update_username, UsernameParams),
        Route("PATCH", "/users/password", routes.update_password, PasswordPatch),
        Route("DELETE", "/users", routes.delete_user),
        Route("POST", "/login", routes.log_in, Credentials),
        Route("POST", "/logout", routes.log_out),
        Route("GET", "/posts", routes.get_posts, PostsQuery),
        Route("POST", "/posts", routes.create_post, PostCreate),
        Route("PATCH", "/posts/{post_id}", routes.update_post, PostPatch),
        Route("DELETE", "/posts/{post_id}", routes.delete_post),
        Route("GET", "/friends", routes.get_friends),
        Route("DELETE", "/friends/{friend}", routes.remove_friend),
        Route("GET", "/friend/requests", routes.get_friend_requests),
        Route("POST", "/friend/requests/{to}", routes.send_friend_request),
        Route("DELETE", "/friend/requests/{to}", routes.remove_friend_request),
        Route("PUT", "/friend/accept/{sender}", routes.accept_friend_request),
        Route("PUT", "/friend/reject/{sender}", routes.reject_friend_request),
        Route("PUT", "/webapp", routes.add_webapp, WebappCreate),
        Route("GET", "/webapp/view/all", routes.view_all_webapps),
        Route("DELETE", "/webapp", routes.delete_webapp, WebappRef),
        Route("PATCH", "/webapp", routes.patch_webapp, WebappPatch),
        Route("POST", "/tag/add", routes.add_tags_to_webapp, TagsBody),
        Route("POST", "/tag/delete", routes.delete_tags_from_webapp, TagsBody),
        Route("GET", "/tag/view/{webapp_id}", routes.view_tags_for_webapp),
        Route("GET", "/tag/filter/{tag}", routes.filter_webapps_by_tag),
        Route("GET", "/tag/top", routes.top_tags, TopTagsQuery),
        Route("GET", "/graph", routes.get_graph),
        Route("GET", "/graph/{webapp_id}", routes.get_webapp_neighbors),
        Route("POST", "/graph/rebuild", routes.rebuild_graph),
    ]


def register_error_handlers(router: Router, authing: AuthenticatingConcept) -> None:
    """Replace user IDs in concept error messages with usernames."""

    def usernames(*ids: str) -> list[str]:
        return authing.ids_to_usernames(list(ids))

    def post_author(e: PostAuthorNotMatchError):
        return e.format_with(*usernames(e.author), e.post_id)

    def webapp_owner(e: WebappOwnerNotMatchError):
        return e.format_with(*usernames(e.user), e.webapp_id)

    def request_pair(e: FriendRequestAlreadyExistsError | FriendRequestNotFoundError):
        return e.format_with(*usernames(e.from_user, e.to_user))

    def friend_pair(e: FriendNotFoundError | AlreadyFriendsError):
        return e.format_with(*usernames(e.user1, e.user2))

    router.register_error(PostAuthorNotMatchError, post_author)
    router.register_error(WebappOwnerNotMatchError, webapp_owner)
    router.register_error(FriendRequestAlreadyExistsError, request_pair)
    router.register_error(FriendRequestNotFoundError, request_pair)
    router.register_error(FriendNotFoundError, friend_pair)
    router.register_error(AlreadyFriendsError, friend_pair)


def build_router(routes: Routes) -> Router:
    router = Router(route_table(routes))
    register_error_handlers(router, routes.authing)
    return router
