"""Shared test fixtures."""

from __future__ import annotations

from dataclasses import dataclass

import pytest
from bson import ObjectId

from reverse_populate.adapters.memory import AsyncMemoryCollection, MemoryCollection


@dataclass
class Blog:
    """A blog graph: 2 categories, 1 author, 5 posts in both categories."""

    categories: list[dict]
    authors: list[dict]
    posts: list[dict]
    category_source: MemoryCollection
    post_source: MemoryCollection


def _make_blog(source_class: type[MemoryCollection]) -> Blog:
    categories = [
        {"_id": ObjectId(), "name": "python"},
        {"_id": ObjectId(), "name": "mongo"},
    ]
    authors = [{"_id": ObjectId(), "first_name": "Ada", "last_name": "Lovelace"}]
    titles = ["delta", "alpha", "echo", "charlie", "bravo"]
    posts = [
        {
            "_id": ObjectId(),
            "title": title,
            "categories": [c["_id"] for c in categories],
            "author": authors[0]["_id"],
            "content": f"content of {title}",
        }
        for title in titles
    ]

    category_source = source_class([dict(c) for c in categories])
    post_source = source_class(
        [dict(p) for p in posts],
        references={"categories": category_source},
    )
    return Blog(categories, authors, posts, category_source, post_source)


@pytest.fixture
def blog() -> Blog:
    """Blog graph over synchronous in-memory sources."""
    return _make_blog(MemoryCollection)


@pytest.fixture
def async_blog() -> Blog:
    """Blog graph over asynchronous in-memory sources."""
    return _make_blog(AsyncMemoryCollection)


@pytest.fixture
def people() -> tuple[list[dict], list[dict], AsyncMemoryCollection]:
    """Two people, each owning exactly one passport."""
    persons = [
        {"_id": ObjectId(), "first_name": "Grace"},
        {"_id": ObjectId(), "first_name": "Alan"},
    ]
    passports = [
        {"_id": ObjectId(), "number": "P-1", "owner": persons[0]["_id"]},
        {"_id": ObjectId(), "number": "P-2", "owner": persons[1]["_id"]},
    ]
    return persons, passports, AsyncMemoryCollection([dict(p) for p in passports])
