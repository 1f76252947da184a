from mediable.domain.entities.dirty_tags import DirtyTagTracker


def test_new_tracker_is_clean():
    t = DirtyTagTracker()
    assert not t
    assert t.is_dirty() is False
    assert t.is_dirty(["x"]) is False
    assert t.tags == frozenset()


def test_mark_is_per_tag():
    t = DirtyTagTracker()
    t.mark(["x", "y"])
    assert t.is_dirty()
    assert t.is_dirty(["y", "z"])
    assert not t.is_dirty(["z"])
    assert t.tags == {"x", "y"}


def test_mark_all_is_a_wildcard():
    t = DirtyTagTracker()
    t.mark_all()
    assert t.is_dirty(["anything"])
    assert repr(t) == "<DirtyTagTracker all>"


def test_clear_resets_everything():
    t = DirtyTagTracker()
    t.mark(["x"])
    t.mark_all()
    t.clear()
    assert not t
    assert repr(t) == "<DirtyTagTracker []>"
