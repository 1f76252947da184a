from __future__ import annotations

from sqlalchemy import select

from mediable.database.repos.mediable_repo import SqlAlchemyMediableRepo
from mediable.domain.entities.links.media_link import MediaLink
from mediable_models import Post


def _ids(rows):
    return {r.id for r in rows}


def _seed(db, make_media):
    """
    p1  x: a, c   y: b, c
    p2  y: b
    p3  (nothing)
    """
    p1, p2, p3 = Post(title="p1"), Post(title="p2"), Post(title="p3")
    db.add_all([p1, p2, p3])
    a, b, c = make_media("a"), make_media("b"), make_media("c")
    p1.attach_media(a, "x")
    p1.attach_media(b, "y")
    p1.attach_media(c, ["x", "y"])
    p2.attach_media(b, "y")
    db.flush()
    return p1, p2, p3, a, b, c


def test_where_has_media_any(db, make_media):
    p1, p2, p3, *_ = _seed(db, make_media)

    found = db.execute(select(Post).where(Post.where_has_media("x"))).scalars().all()
    assert _ids(found) == {p1.id}

    found = db.execute(select(Post).where(Post.where_has_media(["x", "y"]))).scalars().all()
    assert _ids(found) == {p1.id, p2.id}

    found = db.execute(select(Post).where(~Post.where_has_media(["x", "y"]))).scalars().all()
    assert p3.id in _ids(found)


def test_where_has_media_match_all(db, make_media):
    p1, p2, p3, *_ = _seed(db, make_media)

    found = db.execute(select(Post).where(Post.where_has_media(["x", "y"], match_all=True))).scalars().all()
    assert _ids(found) == {p1.id}

    found = db.execute(select(Post).where(Post.where_has_media_match_all(["y"]))).scalars().all()
    assert _ids(found) == {p1.id, p2.id}

    found = db.execute(select(Post).where(Post.where_has_media_match_all(["x", "z"]))).scalars().all()
    assert found == []


def test_where_has_media_ignores_other_mediable_types(db, make_media):
    p1, p2, p3, a, *_ = _seed(db, make_media)
    # a pivot row of another type that happens to share p3's key
    SqlAlchemyMediableRepo(db).insert_links([
        MediaLink(mediable_type="article", mediable_id=p3.id, media_id=a.id, tag="z", order=1),
    ])

    found = db.execute(select(Post).where(Post.where_has_media("z"))).scalars().all()
    assert found == []


def test_with_media_eager_loads_filtered_links(db, make_media):
    p1, p2, p3, a, b, c = _seed(db, make_media)
    p1_id = p1.id
    db.expunge_all()

    post = db.execute(select(Post).where(Post.id == p1_id).options(Post.with_media("x"))).scalars().one()
    assert "media_links" in post.__dict__
    assert [(l.tag, l.media_id) for l in post.media_links] == [("x", a.id), ("x", c.id)]


def test_with_media_match_all_keeps_only_media_on_every_tag(db, make_media):
    p1, p2, p3, a, b, c = _seed(db, make_media)
    p1_id = p1.id
    db.expunge_all()

    post = db.execute(
        select(Post).where(Post.id == p1_id).options(Post.with_media(["x", "y"], match_all=True))
    ).scalars().one()
    assert {(l.tag, l.media_id) for l in post.media_links} == {("x", c.id), ("y", c.id)}


def test_with_media_without_tags_loads_everything(db, make_media):
    p1, p2, p3, a, b, c = _seed(db, make_media)
    db.expunge_all()

    posts = db.execute(select(Post).options(Post.with_media()).order_by(Post.title)).scalars().all()
    by_title = {p.title: p for p in posts}
    assert len(by_title["p1"].media_links) == 4
    assert [l.media_id for l in by_title["p2"].media_links] == [b.id]
    assert by_title["p3"].media_links == []


def test_load_media_restricted_to_tags(db, make_media):
    p1, p2, p3, a, b, c = _seed(db, make_media)

    assert p1.load_media("x") is p1
    assert {l.tag for l in p1.media_links} == {"x"}
    assert not p1.media_dirty_tags

    p1.load_media()
    assert {l.tag for l in p1.media_links} == {"x", "y"}


def test_load_media_match_all(db, make_media):
    p1, p2, p3, a, b, c = _seed(db, make_media)

    p1.load_media(["x", "y"], match_all=True)
    assert {l.media_id for l in p1.media_links} == {c.id}

    p1.load_media_match_all(["y"])
    assert [l.media_id for l in p1.media_links] == [b.id, c.id]


def test_where_has_media_match_all_needs_one_media_on_every_tag(db, make_media):
    split, joined = Post(title="split"), Post(title="joined")
    db.add_all([split, joined])
    a, b = make_media("a"), make_media("b")
    # tags spread over different media
    split.attach_media(a, "x")
    split.attach_media(b, "y")
    joined.attach_media(a, ["x", "y"])
    db.flush()

    found = db.execute(select(Post).where(Post.where_has_media(["x", "y"], match_all=True))).scalars().all()
    assert _ids(found) == {joined.id}
    assert split.has_media(["x", "y"], match_all=True) is False
    assert joined.has_media(["x", "y"], match_all=True) is True
