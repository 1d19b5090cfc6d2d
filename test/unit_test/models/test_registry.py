"""Unit tests for the model registry."""

from typing import List, Optional

import pytest
from pydantic import BaseModel
from sqlmodel import Field, Relationship, SQLModel

from restbone.core.errors import RegistryError, UnknownResourceError
from restbone.models import EmbeddedResource, ModelRegistry
from test.blog_models import Author, Comment, Entry, Journal, Post, Tag


class Note(SQLModel, table=True):
    __tablename__ = "notes"

    id: Optional[int] = Field(default=None, primary_key=True)
    text: str
    notebook_id: Optional[int] = Field(default=None, foreign_key="notebooks.id")


class Notebook(SQLModel, table=True):
    __tablename__ = "notebooks"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    notes: List[Note] = Relationship()

    def to_json_save(self):
        return {"title": self.title.upper()}


class TestRegister:
    def test_register_returns_model(self):
        registry = ModelRegistry()

        assert registry.register(Author) is Author
        assert "authors" in registry
        assert len(registry) == 1

    def test_name_defaults_to_table_name(self):
        registry = ModelRegistry()
        registry.register(Post, embedded={"comments": Comment})

        entry = registry.resource("posts")
        assert entry.model is Post
        assert entry.singular == "post"
        assert entry.plural == "posts"

    def test_explicit_names(self):
        registry = ModelRegistry()
        registry.register(Post, name="articles", embedded={"comments": (Comment, "replies")})

        assert registry.get_top_level() == ["articles"]
        assert registry.get_embedded() == ["replies"]
        child = registry.get_children("articles")[0]
        assert child == EmbeddedResource(resource="replies", attribute="comments", model=Comment)
        assert child.singular == "reply"

    def test_rejects_non_table_classes(self):
        class Plain(BaseModel):
            name: str

        registry = ModelRegistry()

        with pytest.raises(RegistryError):
            registry.register(Plain)

    def test_rejects_duplicate_names(self):
        registry = ModelRegistry()
        registry.register(Author)

        with pytest.raises(RegistryError, match="already registered"):
            registry.register(Author)

    def test_rejects_missing_attribute(self):
        registry = ModelRegistry()

        with pytest.raises(RegistryError, match="has no attribute 'replies'"):
            registry.register(Post, embedded={"replies": Comment})

    def test_rejects_embedded_model_as_top_level(self):
        registry = ModelRegistry()
        registry.register(Post, embedded={"comments": Comment})

        with pytest.raises(RegistryError):
            registry.register(Comment)

    def test_rejects_top_level_model_as_embedded(self):
        registry = ModelRegistry()
        registry.register(Note)

        with pytest.raises(RegistryError):
            registry.register(Notebook, embedded={"notes": Note})

    def test_rejects_child_shadowing_parent_parameter(self):
        registry = ModelRegistry()

        with pytest.raises(RegistryError, match="shadows"):
            registry.register(Post, embedded={"comments": (Comment, "posts")})

    def test_failed_registration_leaves_registry_unchanged(self):
        registry = ModelRegistry()

        with pytest.raises(RegistryError):
            registry.register(Post, embedded={"comments": Comment, "missing": Tag})

        assert len(registry) == 0
        assert registry.get_embedded() == []


class TestLookups:
    @pytest.fixture
    def registry(self) -> ModelRegistry:
        registry = ModelRegistry()
        registry.register(Post, embedded={"comments": Comment, "tags": Tag})
        registry.register(Author)
        registry.register(Journal, embedded={"entries": Entry})
        return registry

    def test_top_level_in_registration_order(self, registry):
        assert registry.get_top_level() == ["posts", "authors", "journals"]

    def test_embedded_in_declaration_order(self, registry):
        assert registry.get_embedded() == ["comments", "tags", "entries"]

    def test_children(self, registry):
        assert [child.resource for child in registry.get_children("posts")] == ["comments", "tags"]
        assert registry.get_children("authors") == []
        assert registry.has_children("journals")
        assert not registry.has_children("authors")

    @pytest.mark.parametrize(
        "name,model",
        [("posts", Post), ("authors", Author), ("comments", Comment), ("entries", Entry)],
    )
    def test_model(self, registry, name, model):
        assert registry.model(name) is model

    def test_unknown_resource_raises_key_error(self, registry):
        with pytest.raises(UnknownResourceError) as exc_info:
            registry.model("widgets")

        assert isinstance(exc_info.value, KeyError)
        assert exc_info.value.resource == "widgets"

    def test_resource_is_for_top_level_only(self, registry):
        with pytest.raises(UnknownResourceError):
            registry.resource("comments")

    def test_find(self, registry):
        assert registry.find(Post) == "posts"
        assert registry.find(Tag) == "tags"
        assert registry.find(Note) is None

    def test_clear(self, registry):
        registry.clear()

        assert len(registry) == 0
        assert "posts" not in registry
        assert registry.get_embedded() == []


class TestSerialize:
    def test_columns_only_for_transient_instance(self):
        registry = ModelRegistry()
        registry.register(Author)

        data = registry.serialize("authors", Author(id=3, name="Ann"))

        assert data == {"id": 3, "name": "Ann", "email": None}

    def test_includes_loaded_children(self):
        registry = ModelRegistry()
        registry.register(Post, embedded={"comments": Comment})
        post = Post(id=1, title="Hi", slug="hi", comments=[Comment(id=7, body="Yo", post_id=1)])

        data = registry.serialize("posts", post)

        assert data["title"] == "Hi"
        assert data["comments"] == [{"id": 7, "body": "Yo", "author": "anonymous", "post_id": 1}]

    def test_prefers_to_json_save(self):
        registry = ModelRegistry()
        registry.register(Notebook, embedded={"notes": Note})

        assert registry.serialize("notebooks", Notebook(id=1, title="ideas")) == {"title": "IDEAS"}
