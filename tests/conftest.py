"""
Pytest Configuration and Fixtures for Kanban Snapshot Tests.

This module provides fixtures, mock factories, and shared utilities for
testing the exporter and importer.

Architecture:
    - MockKanbanBackend: In-memory async implementation of KanbanBackend
    - Factories: Generate backend entities and raw snapshot documents
    - Fixtures: Provide configured backends and sample documents
    - Markers: Custom pytest markers for test categorization
"""

from __future__ import annotations

import time
from typing import Any, Callable

import pytest

from kanban_snapshot.constants import DEFAULT_TAG_COLOR, SCHEMA_VERSION
from kanban_snapshot.exceptions import KanbanBackendError, KanbanNotFoundError
from kanban_snapshot.models import (
    Card,
    Column,
    Comment,
    FilterPreset,
    Revision,
    Tag,
    User,
)


# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "export: Exporter tests")
    config.addinivalue_line("markers", "import_: Importer tests")
    config.addinivalue_line("markers", "roundtrip: Export then import tests")
    config.addinivalue_line("markers", "storage: Document file tests")
    config.addinivalue_line("markers", "http: HTTP backend adapter tests")
    config.addinivalue_line("markers", "server: MCP tool tests")


# =============================================================================
# Time Utilities
# =============================================================================


def now_nanos() -> int:
    """Current time in backend nanoseconds, truncated to whole milliseconds."""
    return (time.time_ns() // 1_000_000) * 1_000_000


# =============================================================================
# ID Generators
# =============================================================================


class IDGenerator:
    """Sequential backend id generator for test objects."""

    _counter: int = 1000

    @classmethod
    def reset(cls) -> None:
        """Reset counter (call in fixtures)."""
        cls._counter = 1000

    @classmethod
    def next_id(cls) -> int:
        """Generate next unique backend id."""
        cls._counter += 1
        return cls._counter


# =============================================================================
# Mock Backend
# =============================================================================


class MockKanbanBackend:
    """
    In-memory mock of the KanbanBackend protocol.

    Provides configurable failures per method, either unconditional
    (``should_fail``) or argument-dependent (``fail_when``), and records
    every call for verification.
    """

    def __init__(self):
        """Initialize mock with empty data stores."""
        self.users: dict[int, User] = {}
        self.pin_hashes: dict[int, str] = {}
        self.columns: dict[int, Column] = {}
        self.cards: dict[int, Card] = {}
        self.tags: dict[int, Tag] = {}
        self.comments: dict[int, list[Comment]] = {}
        self.revisions: list[Revision] = []
        self.presets: dict[int, FilterPreset] = {}

        # Track method calls for verification
        self.call_history: list[tuple[str, tuple]] = []

        # Configurable behaviors
        self.should_fail: dict[str, Exception | None] = {}
        self.fail_when: dict[str, Callable[..., bool]] = {}

    def _record_call(self, method: str, args: tuple) -> None:
        """Record method call and raise if it is configured to fail."""
        self.call_history.append((method, args))
        if self.should_fail.get(method):
            raise self.should_fail[method]
        predicate = self.fail_when.get(method)
        if predicate is not None and predicate(*args):
            raise KanbanBackendError(f"{method} rejected", operation=method)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get_columns(self, project_id: int) -> list[Column]:
        self._record_call("get_columns", (project_id,))
        return [c.model_copy(deep=True) for c in self.columns.values() if c.project_id == project_id]

    async def get_cards(self, project_id: int) -> list[Card]:
        self._record_call("get_cards", (project_id,))
        return [c.model_copy(deep=True) for c in self.cards.values() if c.project_id == project_id]

    async def get_users(self) -> list[User]:
        self._record_call("get_users", ())
        return list(self.users.values())

    async def get_project_tags(self, project_id: int) -> list[Tag]:
        self._record_call("get_project_tags", (project_id,))
        return [t for t in self.tags.values() if t.project_id == project_id]

    async def get_revisions(self, project_id: int) -> list[Revision]:
        self._record_call("get_revisions", (project_id,))
        project_cards = {c.id for c in self.cards.values() if c.project_id == project_id}
        return [
            r for r in self.revisions
            if r.card_id is None or r.card_id in project_cards
        ]

    async def get_filter_presets(self, project_id: int) -> list[FilterPreset]:
        self._record_call("get_filter_presets", (project_id,))
        return [p for p in self.presets.values() if p.project_id == project_id]

    async def get_card_comments(self, card_id: int) -> list[Comment]:
        self._record_call("get_card_comments", (card_id,))
        return list(self.comments.get(card_id, []))

    async def get_card_revisions(self, card_id: int) -> list[Revision]:
        self._record_call("get_card_revisions", (card_id,))
        return [r for r in self.revisions if r.card_id == card_id]

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------

    async def create_user(self, name: str, pin_hash: str) -> int:
        self._record_call("create_user", (name, pin_hash))
        user = User(id=IDGenerator.next_id(), name=name)
        self.users[user.id] = user
        self.pin_hashes[user.id] = pin_hash
        return user.id

    async def create_tag(self, project_id: int, name: str, color: str, actor_user_id: int) -> int:
        self._record_call("create_tag", (project_id, name, color, actor_user_id))
        tag = Tag(id=IDGenerator.next_id(), name=name, color=color, project_id=project_id)
        self.tags[tag.id] = tag
        return tag.id

    async def create_column(self, name: str, actor_user_id: int, project_id: int) -> int:
        self._record_call("create_column", (name, actor_user_id, project_id))
        column = Column(id=IDGenerator.next_id(), name=name, project_id=project_id)
        self.columns[column.id] = column
        return column.id

    async def create_card(
        self,
        title: str,
        description: str | None,
        column_id: int,
        actor_user_id: int,
        project_id: int,
    ) -> int:
        self._record_call("create_card", (title, description, column_id, actor_user_id, project_id))
        if column_id not in self.columns:
            raise KanbanNotFoundError(f"Column not found: {column_id}", operation="create_card")
        card = Card(
            id=IDGenerator.next_id(),
            title=title,
            description=description,
            column_id=column_id,
            created_at=now_nanos(),
            project_id=project_id,
        )
        self.cards[card.id] = card
        self.columns[column_id].card_ids.append(card.id)
        return card.id

    async def add_comment(self, card_id: int, text: str, actor_user_id: int) -> int:
        self._record_call("add_comment", (card_id, text, actor_user_id))
        if card_id not in self.cards:
            raise KanbanNotFoundError(f"Card not found: {card_id}", operation="add_comment")
        author = self.users.get(actor_user_id)
        comment = Comment(
            id=IDGenerator.next_id(),
            card_id=card_id,
            author_id=actor_user_id,
            author_name=author.name if author else "",
            text=text,
            timestamp=now_nanos(),
        )
        self.comments.setdefault(card_id, []).append(comment)
        return comment.id

    async def save_filter_preset(
        self,
        project_id: int,
        actor_user_id: int,
        name: str,
        assignee_id: int | None,
        tag_ids: list[int],
        unassigned_only: bool,
        text_search: str,
        date_field: str | None,
        date_from: str,
        date_to: str,
    ) -> int:
        self._record_call(
            "save_filter_preset",
            (project_id, actor_user_id, name, assignee_id, tag_ids, unassigned_only,
             text_search, date_field, date_from, date_to),
        )
        preset = FilterPreset(
            id=IDGenerator.next_id(),
            name=name,
            created_by_user_id=actor_user_id,
            assignee_id=assignee_id,
            tag_ids=list(tag_ids),
            unassigned_only=unassigned_only,
            text_search=text_search,
            date_field=date_field,
            date_from=date_from,
            date_to=date_to,
            project_id=project_id,
        )
        self.presets[preset.id] = preset
        return preset.id

    # -------------------------------------------------------------------------
    # Card updates
    # -------------------------------------------------------------------------

    def _card(self, card_id: int, operation: str) -> Card:
        if card_id not in self.cards:
            raise KanbanNotFoundError(f"Card not found: {card_id}", operation=operation)
        return self.cards[card_id]

    async def assign_card(self, card_id: int, user_id: int | None, actor_user_id: int) -> None:
        self._record_call("assign_card", (card_id, user_id, actor_user_id))
        self._card(card_id, "assign_card").assigned_user_id = user_id

    async def update_card_tags(self, card_id: int, tag_ids: list[int], actor_user_id: int) -> None:
        self._record_call("update_card_tags", (card_id, tag_ids, actor_user_id))
        self._card(card_id, "update_card_tags").tags = list(tag_ids)

    async def update_card_due_date(self, card_id: int, due_date: int | None, actor_user_id: int) -> None:
        self._record_call("update_card_due_date", (card_id, due_date, actor_user_id))
        self._card(card_id, "update_card_due_date").due_date = due_date

    # -------------------------------------------------------------------------
    # Deletion
    # -------------------------------------------------------------------------

    async def delete_column(self, column_id: int, actor_user_id: int) -> None:
        self._record_call("delete_column", (column_id, actor_user_id))
        if column_id not in self.columns:
            raise KanbanNotFoundError(f"Column not found: {column_id}", operation="delete_column")
        column = self.columns.pop(column_id)
        for card_id in column.card_ids:
            self.cards.pop(card_id, None)
            self.comments.pop(card_id, None)

    async def delete_tag(self, tag_id: int, actor_user_id: int) -> None:
        self._record_call("delete_tag", (tag_id, actor_user_id))
        if tag_id not in self.tags:
            raise KanbanNotFoundError(f"Tag not found: {tag_id}", operation="delete_tag")
        del self.tags[tag_id]
        for card in self.cards.values():
            card.tags = [t for t in card.tags if t != tag_id]

    async def delete_filter_preset(self, preset_id: int, actor_user_id: int) -> None:
        self._record_call("delete_filter_preset", (preset_id, actor_user_id))
        if preset_id not in self.presets:
            raise KanbanNotFoundError(f"Preset not found: {preset_id}", operation="delete_filter_preset")
        del self.presets[preset_id]

    # -------------------------------------------------------------------------
    # Seeding helpers
    # -------------------------------------------------------------------------

    def add_user(self, name: str, is_admin: bool = False) -> User:
        user = User(id=IDGenerator.next_id(), name=name, is_admin=is_admin)
        self.users[user.id] = user
        return user

    def add_tag(self, project_id: int, name: str, color: str = DEFAULT_TAG_COLOR) -> Tag:
        tag = Tag(id=IDGenerator.next_id(), name=name, color=color, project_id=project_id)
        self.tags[tag.id] = tag
        return tag

    def add_column(self, project_id: int, name: str) -> Column:
        column = Column(id=IDGenerator.next_id(), name=name, project_id=project_id)
        self.columns[column.id] = column
        return column

    def add_card(self, column: Column, title: str, **kwargs: Any) -> Card:
        card = Card(
            id=IDGenerator.next_id(),
            title=title,
            column_id=column.id,
            created_at=kwargs.pop("created_at", now_nanos()),
            project_id=column.project_id,
            **kwargs,
        )
        self.cards[card.id] = card
        self.columns[column.id].card_ids.append(card.id)
        return card

    def add_comment_for(self, card: Card, author: User, text: str) -> Comment:
        comment = Comment(
            id=IDGenerator.next_id(),
            card_id=card.id,
            author_id=author.id,
            author_name=author.name,
            text=text,
            timestamp=now_nanos(),
        )
        self.comments.setdefault(card.id, []).append(comment)
        return comment

    def add_revision(self, description: str, card: Card | None = None) -> Revision:
        revision = Revision(
            id=IDGenerator.next_id(),
            actor_name="Alice",
            revision_type="cardCreated" if card else "columnCreated",
            description=description,
            timestamp=now_nanos(),
            card_id=card.id if card else None,
        )
        self.revisions.append(revision)
        return revision

    def add_preset(self, project_id: int, name: str, creator: User, **kwargs: Any) -> FilterPreset:
        preset = FilterPreset(
            id=IDGenerator.next_id(),
            name=name,
            created_by_user_id=creator.id,
            project_id=project_id,
            **kwargs,
        )
        self.presets[preset.id] = preset
        return preset

    def seed_project(self, project_id: int) -> dict[str, Any]:
        """
        Seed one project with a representative board.

        Layout:
            To Do:       "Write docs" (alice, bug, due), "Fix login" (2 comments)
            In Progress: "Refactor importer" (feature)
            Done:        (empty)
        """
        alice = self.add_user("Alice", is_admin=True)
        bob = self.add_user("Bob")
        bug = self.add_tag(project_id, "bug", "#ef4444")
        feature = self.add_tag(project_id, "feature", "#22c55e")

        todo = self.add_column(project_id, "To Do")
        doing = self.add_column(project_id, "In Progress")
        done = self.add_column(project_id, "Done")

        docs = self.add_card(
            todo,
            "Write docs",
            description="Cover import modes",
            assigned_user_id=alice.id,
            tags=[bug.id],
            due_date=1_700_000_000_123_000_000,
        )
        login = self.add_card(todo, "Fix login")
        refactor = self.add_card(doing, "Refactor importer", tags=[feature.id])

        self.add_comment_for(login, alice, "Repro on staging")
        self.add_comment_for(login, bob, "Fixed in branch")

        self.add_revision("Created column To Do")
        self.add_revision("Created column In Progress")
        self.add_revision("Created card Write docs", card=docs)

        self.add_preset(
            project_id,
            "Alice bugs",
            alice,
            assignee_id=alice.id,
            tag_ids=[bug.id],
            date_field="dueDate",
            date_from="2024-01-01",
            date_to="2024-12-31",
        )

        return {
            "users": {"alice": alice, "bob": bob},
            "tags": {"bug": bug, "feature": feature},
            "columns": {"todo": todo, "doing": doing, "done": done},
            "cards": {"docs": docs, "login": login, "refactor": refactor},
        }

    # -------------------------------------------------------------------------
    # Utility Methods
    # -------------------------------------------------------------------------

    def column_names(self, project_id: int) -> list[str]:
        return [c.name for c in self.columns.values() if c.project_id == project_id]

    def card_titles(self, column_id: int) -> list[str]:
        return [self.cards[card_id].title for card_id in self.columns[column_id].card_ids]

    def clear_call_history(self) -> None:
        """Clear recorded method calls."""
        self.call_history.clear()

    def get_calls(self, method_name: str) -> list[tuple]:
        """Get the arguments of all calls to a specific method."""
        return [args for name, args in self.call_history if name == method_name]

    def assert_called(self, method_name: str, times: int | None = None) -> None:
        """Assert a method was called (optionally a specific number of times)."""
        calls = self.get_calls(method_name)
        if times is not None:
            assert len(calls) == times, f"Expected {method_name} to be called {times} times, got {len(calls)}"
        else:
            assert len(calls) > 0, f"Expected {method_name} to be called at least once"

    def assert_not_called(self, method_name: str) -> None:
        """Assert a method was not called."""
        calls = self.get_calls(method_name)
        assert len(calls) == 0, f"Expected {method_name} not to be called, but was called {len(calls)} times"


# =============================================================================
# Document Factories
# =============================================================================


class DocumentFactory:
    """Factory for raw (JSON-shaped, camelCase) snapshot documents."""

    @staticmethod
    def card(
        id: str,
        title: str,
        order: int = 0,
        *,
        description: str | None = None,
        assigned_user_id: str | None = None,
        tags: list[str] | None = None,
        due_date: str | None = None,
        comments: list[dict[str, Any]] | None = None,
        **extra: Any,
    ) -> dict[str, Any]:
        """Create a card node."""
        return {
            "id": id,
            "title": title,
            "description": description,
            "order": order,
            "assignedUserId": assigned_user_id,
            "tags": tags or [],
            "dueDate": due_date,
            "createdAt": "2024-01-01T00:00:00.000Z",
            "comments": comments or [],
            "history": [],
            **extra,
        }

    @staticmethod
    def comment(id: str, text: str, author_id: str = "u1") -> dict[str, Any]:
        """Create a comment node."""
        return {
            "id": id,
            "authorId": author_id,
            "authorName": "Someone",
            "text": text,
            "timestamp": "2024-01-02T00:00:00.000Z",
        }

    @staticmethod
    def column(id: str, name: str, cards: list[dict[str, Any]] | None = None) -> dict[str, Any]:
        """Create a column node."""
        return {"id": id, "name": name, "cards": cards or []}

    @staticmethod
    def tag(id: str, name: str, color: str = "#ef4444") -> dict[str, Any]:
        """Create a tag node."""
        return {"id": id, "name": name, "color": color}

    @staticmethod
    def user(id: str, name: str, is_admin: bool = False) -> dict[str, Any]:
        """Create a user node."""
        return {"id": id, "name": name, "isAdmin": is_admin, "isMasterAdmin": False}

    @staticmethod
    def preset(
        id: str,
        name: str,
        *,
        assignee_id: str | None = None,
        tag_ids: list[str] | None = None,
    ) -> dict[str, Any]:
        """Create a filter preset node."""
        return {
            "id": id,
            "name": name,
            "createdByUserId": "u1",
            "assigneeId": assignee_id,
            "tagIds": tag_ids or [],
            "unassignedOnly": False,
            "textSearch": "",
            "dateField": None,
            "dateFrom": "2024-01-01",
            "dateTo": "2024-06-30",
        }

    @staticmethod
    def create(
        columns: list[dict[str, Any]] | None = None,
        *,
        users: list[dict[str, Any]] | None = None,
        tags: list[dict[str, Any]] | None = None,
        presets: list[dict[str, Any]] | None = None,
        schema_version: Any = SCHEMA_VERSION,
    ) -> dict[str, Any]:
        """Create a full document with sensible defaults."""
        document: dict[str, Any] = {
            "exportedAt": "2024-01-03T00:00:00.000Z",
            "users": users or [],
            "project": {
                "id": "p1",
                "name": "Source Project",
                "columns": columns or [],
                "tags": tags or [],
                "activity": [],
                "filterPresets": presets or [],
            },
        }
        if schema_version is not None:
            document["schemaVersion"] = schema_version
        return document

    @classmethod
    def create_board(cls) -> dict[str, Any]:
        """
        A representative board.

        Users u1 (Alice), u2 (Bob); tags t1 (bug), t2 (feature);
        column c1 "To Do" with three cards listed out of order,
        column c2 "Done" with one card.
        """
        return cls.create(
            [
                cls.column(
                    "c1",
                    "To Do",
                    [
                        cls.card("k3", "Third", 2),
                        cls.card(
                            "k1",
                            "First",
                            0,
                            assigned_user_id="u1",
                            tags=["t1", "t2"],
                            due_date="2024-05-01T12:00:00.000Z",
                            comments=[cls.comment("m1", "hello"), cls.comment("m2", "again")],
                        ),
                        cls.card("k2", "Second", 1, description="middle"),
                    ],
                ),
                cls.column("c2", "Done", [cls.card("k4", "Shipped", 0, tags=["t2"])]),
            ],
            users=[cls.user("u1", "Alice", is_admin=True), cls.user("u2", "Bob")],
            tags=[cls.tag("t1", "bug"), cls.tag("t2", "feature", "#22c55e")],
            presets=[cls.preset("f1", "Alice bugs", assignee_id="u1", tag_ids=["t1", "t9"])],
        )


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def id_generator():
    """Reset and provide ID generator."""
    IDGenerator.reset()
    return IDGenerator


@pytest.fixture
def backend() -> MockKanbanBackend:
    """Create a fresh mock backend."""
    return MockKanbanBackend()


@pytest.fixture
def seeded_backend() -> MockKanbanBackend:
    """Create a mock backend with project 1 seeded."""
    mock = MockKanbanBackend()
    mock.seed = mock.seed_project(1)
    return mock


@pytest.fixture
def document_factory() -> type[DocumentFactory]:
    """Provide DocumentFactory class."""
    return DocumentFactory


@pytest.fixture
def board_document() -> dict[str, Any]:
    """A representative raw document."""
    return DocumentFactory.create_board()


@pytest.fixture
def acting_user(backend: MockKanbanBackend) -> User:
    """The importing user, already present in the backend."""
    return backend.add_user("Importer", is_admin=True)
