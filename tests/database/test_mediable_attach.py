from __future__ import annotations

import uuid

import pytest
from sqlalchemy.exc import IntegrityError

from mediable.database.repos.mediable_repo import SqlAlchemyMediableRepo
from mediable_models import Article, Post


def _rows(db, mediable):
    repo = SqlAlchemyMediableRepo(db)
    return [
        (link.media_id, link.tag, link.order)
        for link in repo.list_links(mediable.get_mediable_type(), mediable.id)
    ]


def test_attach_assigns_sequential_order_per_tag(db, make_media):
    post = Post(title="hello")
    db.add(post)
    a, b, c = make_media("a"), make_media("b"), make_media("c")

    links = post.attach_media([a, b], "gallery")
    assert [(l.media_id, l.tag, l.order) for l in links] == [
        (a.id, "gallery", 1),
        (b.id, "gallery", 2),
    ]

    post.attach_media(c, "gallery")
    assert post.get_media("gallery") == [a, b, c]


def test_attach_multiple_tags_keeps_independent_sequences(db, make_media):
    post = Post(title="multi")
    db.add(post)
    a, b, c = make_media("a"), make_media("b"), make_media("c")

    post.attach_media([a, b], ["x", "y"])
    post.attach_media(c, ["y", "z"])

    assert _rows(db, post) == [
        (a.id, "x", 1),
        (a.id, "y", 1),
        (c.id, "z", 1),
        (b.id, "x", 2),
        (b.id, "y", 2),
        (c.id, "y", 3),
    ]


def test_attach_accepts_keys_and_deduplicates_refs(db, make_media):
    post = Post(title="refs")
    db.add(post)
    a, b = make_media("a"), make_media("b")

    links = post.attach_media([a, a.id, str(a.id), b], "t")
    assert [l.media_id for l in links] == [a.id, b.id]
    assert [l.order for l in links] == [1, 2]


def test_attach_duplicate_pair_is_rejected(db, make_media):
    post = Post(title="dupe")
    db.add(post)
    a = make_media("a")
    post.attach_media(a, "x")

    with pytest.raises(IntegrityError):
        with db.begin_nested():
            post.attach_media(a, "x")

    assert post.get_media("x") == [a]


def test_attach_rejects_unsupported_refs(db, make_media):
    post = Post(title="bad")
    db.add(post)

    with pytest.raises(TypeError):
        post.attach_media(object(), "x")
    with pytest.raises(TypeError):
        post.attach_media(123, "x")
    with pytest.raises(ValueError):
        post.attach_media("not-a-uuid", "x")


def test_attach_requires_a_session():
    post = Post(title="detached")
    with pytest.raises(ValueError):
        post.attach_media(uuid.uuid4(), "x")


def test_custom_discriminator_is_stored(db, make_media):
    art = Article(title="news")
    db.add(art)
    a = make_media("a")
    art.attach_media(a, "hero")

    repo = SqlAlchemyMediableRepo(db)
    assert Article.get_mediable_type() == "article"
    assert [l.media_id for l in repo.list_links("article", art.id)] == [a.id]
    assert repo.list_links("articles", art.id) == []


def test_sync_replaces_tag_contents(db, make_media):
    post = Post(title="sync")
    db.add(post)
    a, b, c = make_media("a"), make_media("b"), make_media("c")
    post.attach_media([a, b], "x")
    post.attach_media(a, "y")

    links = post.sync_media([c, b], "x")

    assert [(l.media_id, l.order) for l in links] == [(c.id, 1), (b.id, 2)]
    assert post.get_media("x") == [c, b]
    assert post.get_media("y") == [a]


def test_sync_with_empty_list_clears_tag(db, make_media):
    post = Post(title="clear")
    db.add(post)
    a = make_media("a")
    post.attach_media(a, "x")

    assert post.sync_media([], "x") == []
    assert post.has_media("x") is False
