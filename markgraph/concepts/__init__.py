"""Concept modules. Each one owns a single document shape and its invariants."""

from markgraph.concepts.authenticating import AuthenticatingConcept
from markgraph.concepts.friending import FriendingConcept
from markgraph.concepts.graphing import GraphingConcept
from markgraph.concepts.posting import PostingConcept
from markgraph.concepts.sessioning import SessioningConcept
from markgraph.concepts.tagging import TaggingConcept
from markgraph.concepts.webapping import WebappingConcept

__all__ = [
    "AuthenticatingConcept",
    "FriendingConcept",
    "GraphingConcept",
    "PostingConcept",
    "SessioningConcept",
    "TaggingConcept",
    "WebappingConcept",
]
