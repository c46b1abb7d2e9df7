from markgraph.doc_store import Database, DocCollection
from markgraph.domain.webapp import WebappDoc
from markgraph.errors import BadValuesError, NotFoundError, WrongUserError


class WebappOwnerNotMatchError(WrongUserError):
    def __init__(self, user: str, webapp_id: str) -> None:
        self.user = user
        self.webapp_id = webapp_id
        super().__init__("{0} is not the owner of webapp {1}!", user, webapp_id)


class WebappingConcept:
    """Bookmarked web apps, scoped by owner.

    Mutations by ID succeed silently when nothing matches; routes check
    ownership with ``assert_owner_is_user`` before mutating.
    """

    def __init__(self, db: Database, collection_name: str = "webapps") -> None:
        self.webapps = DocCollection(db, collection_name, WebappDoc)

    def create(self, user: str, name: str | None, description: str | None, url: str | None) -> dict:
        if not name or not url:
            raise BadValuesError("Webapp name and URL must be non-empty!")
        webapp_id = self.webapps.create_one(
            {"user": user, "name": name, "description": description or "", "url": url}
        )
        return {"msg": "Webapp created successfully!", "id": webapp_id}

    def delete(self, webapp_id: str) -> dict:
        self.webapps.delete_one({"id": webapp_id})
        return {"msg": "Webapp deleted successfully!"}

    def set_name(self, webapp_id: str, name: str) -> dict:
        self.webapps.partial_update_one({"id": webapp_id}, {"name": name})
        return {"msg": "Webapp name updated!"}

    def set_description(self, webapp_id: str, description: str) -> dict:
        self.webapps.partial_update_one({"id": webapp_id}, {"description": description})
        return {"msg": "Webapp description updated!"}

    def set_url(self, webapp_id: str, url: str) -> dict:
        self.webapps.partial_update_one({"id": webapp_id}, {"url": url})
        return {"msg": "Webapp URL updated!"}

    def update(
        self,
        webapp_id: str,
        name: str | None = None,
        description: str | None = None,
        url: str | None = None,
    ) -> dict:
        """Update only the fields that were given."""
        fields = {"name": name, "description": description, "url": url}
        update = {key: value for key, value in fields.items() if value is not None}
        if update:
            self.webapps.partial_update_one({"id": webapp_id}, update)
        return {"msg": "Webapp updated!"}

    def get_by_id(self, webapp_id: str) -> WebappDoc:
        webapp = self.webapps.read_one({"id": webapp_id})
        if webapp is None:
            raise NotFoundError("Webapp {0} does not exist!", webapp_id)
        return webapp

    def get_by_user(self, user: str) -> list[WebappDoc]:
        return self.webapps.read_many({"user": user})

    def assert_owner_is_user(self, webapp_id: str, user: str) -> None:
        webapp = self.get_by_id(webapp_id)
        if webapp.user != user:
            raise WebappOwnerNotMatchError(user, webapp_id)
