import pytest

from dating.errors import ConstraintError, NotFoundError, StoreError
from dating.infra.user_repo import MATCH_LIMIT, UserStore


def _add(store, n, **kw):
    return store.insert(kw.get("name", f"User {n}"), f"user{n}@x.com", "hash", kw.get("bio", f"bio {n}"))


def test_init_schema_is_idempotent(store):
    store.init_schema()
    store.init_schema()
    assert store.find_by_email("nobody@x.com") is None


def test_init_schema_failure_raises_store_error(tmp_path):
    # a directory is not an openable database file
    s = UserStore(f"sqlite:///{tmp_path}")
    with pytest.raises(StoreError):
        s.init_schema()
    s.close()


def test_insert_and_find(store):
    uid = store.insert("Ava", "ava@x.com", "h4sh", "hi")
    assert isinstance(uid, int)

    rec = store.find_by_email("ava@x.com")
    assert rec.id == uid
    assert rec.password_hash == "h4sh"
    assert rec.created_at is not None

    prof = store.find_by_id(uid)
    assert (prof.id, prof.name, prof.email, prof.bio) == (uid, "Ava", "ava@x.com", "hi")
    assert not hasattr(prof, "password_hash")
    assert store.find_by_id(uid + 100) is None


def test_ids_are_increasing(store):
    a = _add(store, 1)
    b = _add(store, 2)
    assert b > a


def test_duplicate_email_is_a_constraint_error(store):
    uid = store.insert("Ava", "ava@x.com", "h", "hi")
    with pytest.raises(ConstraintError) as ei:
        store.insert("Other", "ava@x.com", "h2", "yo")
    assert ei.value.field == "email"
    assert ei.value.status_code == 400
    # still exactly one row with that email, and it is the original one
    assert store.find_by_email("ava@x.com").id == uid
    assert len(store.list_others(0)) == 1


def test_update_changes_only_name_and_bio(store):
    uid = store.insert("Ava", "ava@x.com", "h", "hi")
    before = store.find_by_id(uid)
    store.update(uid, "Ava B", "new bio")
    after = store.find_by_id(uid)
    assert (after.name, after.bio) == ("Ava B", "new bio")
    assert (after.id, after.email, after.created_at) == (before.id, before.email, before.created_at)
    assert store.find_by_email("ava@x.com").password_hash == "h"


def test_update_missing_row(store):
    with pytest.raises(NotFoundError):
        store.update(12345, "x", "y")
    with pytest.raises(NotFoundError):
        store.update_password_hash(12345, "x")


def test_update_password_hash(store):
    uid = store.insert("Ava", "ava@x.com", "old", "hi")
    store.update_password_hash(uid, "new")
    assert store.find_by_email("ava@x.com").password_hash == "new"


def test_list_others_excludes_self_newest_first_and_capped(store):
    ids = [_add(store, n) for n in range(15)]
    me = ids[3]
    matches = store.list_others(me)
    assert len(matches) == MATCH_LIMIT == 12
    names = [m.name for m in matches]
    assert "User 3" not in names
    expected = [f"User {n}" for n in reversed(range(15)) if n != 3][:12]
    assert names == expected
    assert matches[0].bio == "bio 14"


def test_list_others_small_and_custom_limit(store):
    me = _add(store, 1)
    assert store.list_others(me) == []
    _add(store, 2)
    _add(store, 3)
    assert [m.name for m in store.list_others(me, limit=1)] == ["User 3"]
