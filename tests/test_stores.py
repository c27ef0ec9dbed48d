"""Tests for the post index store and its JSON persistence."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from blog_indexer.data import PersistenceError, Post, PostIndexStore, PostState


def make_post(post_id: str, last_modified: str, state: PostState = PostState.PUBLIC) -> Post:
    return Post(
        id=post_id,
        title=f"Title {post_id}",
        excerpt_html=f"<p>{post_id}</p>",
        banner_path="",
        last_modified=last_modified,
        state=state,
    )


def test_upsert_keeps_index_sorted_and_public_subset_derived(tmp_path: Path) -> None:
    store = PostIndexStore(tmp_path / "index.json")
    store.upsert(make_post("old", "2023-01-01 00:00:00"))
    store.upsert(make_post("hidden", "2024-06-01 00:00:00", PostState.PRIVATE))
    store.upsert(make_post("new", "2024-12-31 23:59:59"))

    assert store.ids() == ["new", "hidden", "old"]
    assert [post.id for post in store.public_posts()] == ["new", "old"]
    assert list(store.public_posts()) == [p for p in store.snapshot() if p.state is PostState.PUBLIC]


def test_upsert_replaces_entry_with_same_id(tmp_path: Path) -> None:
    store = PostIndexStore(tmp_path / "index.json")
    store.upsert(make_post("a", "2024-01-01 00:00:00"))
    store.upsert(make_post("b", "2024-02-01 00:00:00"))
    store.upsert(make_post("a", "2024-03-01 00:00:00", PostState.PRIVATE))

    assert len(store) == 2
    assert store.ids() == ["a", "b"]
    assert store.get("a").state is PostState.PRIVATE
    assert [post.id for post in store.public_posts()] == ["b"]


def test_equal_timestamps_keep_insertion_order(tmp_path: Path) -> None:
    store = PostIndexStore(tmp_path / "index.json")
    for post_id in ("first", "second", "third"):
        store.upsert(make_post(post_id, "2024-01-01 00:00:00"))

    assert store.ids() == ["first", "second", "third"]


def test_delete_state_is_never_stored(tmp_path: Path) -> None:
    store = PostIndexStore(tmp_path / "index.json")

    with pytest.raises(ValueError):
        store.upsert(make_post("gone", "2024-01-01 00:00:00", PostState.DELETE))
    with pytest.raises(ValueError):
        store.replace_all([make_post("gone", "2024-01-01 00:00:00", PostState.DELETE)])
    assert len(store) == 0


def test_remove_reports_whether_entry_existed(tmp_path: Path) -> None:
    store = PostIndexStore(tmp_path / "index.json")
    store.upsert(make_post("a", "2024-01-01 00:00:00"))

    assert store.remove("a") is True
    assert store.remove("a") is False
    assert "a" not in store
    assert store.public_posts() == ()


def test_persist_then_load_round_trips(tmp_path: Path) -> None:
    index_path = tmp_path / ".pages" / "postsList.json"
    store = PostIndexStore(index_path)
    store.upsert(make_post("a", "2024-01-01 00:00:00"))
    store.upsert(make_post("b", "2024-02-01 00:00:00", PostState.PRIVATE))
    store.upsert(make_post("c", "2024-03-01 00:00:00"))
    store.persist()

    reloaded = PostIndexStore(index_path)
    assert reloaded.load() == 3

    assert reloaded.snapshot() == store.snapshot()
    assert reloaded.public_posts() == store.public_posts()
    records = json.loads(index_path.read_text(encoding="utf-8"))
    assert [record["id"] for record in records] == ["c", "b", "a"]
    assert set(records[0]) == {
        "id",
        "title",
        "excerpt_html",
        "banner_path",
        "last_modified",
        "state",
    }


def test_persist_leaves_no_temporary_files(tmp_path: Path) -> None:
    store = PostIndexStore(tmp_path / "index.json")
    store.upsert(make_post("a", "2024-01-01 00:00:00"))
    store.persist()
    store.persist()

    assert sorted(path.name for path in tmp_path.iterdir()) == ["index.json"]


def test_persist_failure_raises_persistence_error(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    store = PostIndexStore(blocker / "index.json")
    store.upsert(make_post("a", "2024-01-01 00:00:00"))

    with pytest.raises(PersistenceError):
        store.persist()


def test_load_accepts_legacy_keys(tmp_path: Path) -> None:
    index_path = tmp_path / "postsList.json"
    index_path.write_text(
        json.dumps(
            [
                {
                    "Name": "legacy",
                    "Title": "Old Title",
                    "Body": "<p>old</p>",
                    "Banner": "cover.png",
                    "Mtime": "2022-02-02 02:02:02",
                    "State": "public",
                },
            ]
        ),
        encoding="utf-8",
    )
    store = PostIndexStore(index_path)
    store.load()

    post = store.get("legacy")
    assert post is not None
    assert post.title == "Old Title"
    assert post.excerpt_html == "<p>old</p>"
    assert post.banner_path == "cover.png"
    assert post.is_public


def test_load_skips_invalid_entries(tmp_path: Path) -> None:
    index_path = tmp_path / "index.json"
    good = make_post("good", "2024-01-01 00:00:00").to_record()
    index_path.write_text(
        json.dumps([good, {"id": "bad", "state": "delete"}, {"title": "no id"}, 42]),
        encoding="utf-8",
    )
    store = PostIndexStore(index_path)

    assert store.load() == 1
    assert store.ids() == ["good"]


@pytest.mark.parametrize("content", ["{not json", '{"id": "object"}', ""])
def test_load_of_unusable_file_yields_empty_index(tmp_path: Path, content: str) -> None:
    index_path = tmp_path / "index.json"
    index_path.write_text(content, encoding="utf-8")
    store = PostIndexStore(index_path)
    store.upsert(make_post("stale", "2024-01-01 00:00:00"))

    assert store.load() == 0
    assert len(store) == 0


def test_load_of_missing_file_yields_empty_index(tmp_path: Path) -> None:
    store = PostIndexStore(tmp_path / "missing.json")

    assert store.load() == 0


def test_recent_public_limits_results(tmp_path: Path) -> None:
    store = PostIndexStore(tmp_path / "index.json")
    for day in range(1, 8):
        store.upsert(make_post(f"p{day}", f"2024-01-0{day} 00:00:00"))

    assert [post.id for post in store.recent_public()] == ["p7", "p6", "p5", "p4", "p3"]
    assert store.recent_public(0) == ()


def test_view_is_a_consistent_pair(tmp_path: Path) -> None:
    store = PostIndexStore(tmp_path / "index.json")
    store.upsert(make_post("a", "2024-01-01 00:00:00"))
    view = store.view()
    store.upsert(make_post("b", "2024-02-01 00:00:00"))

    assert [post.id for post in view.posts] == ["a"]
    assert [post.id for post in view.public] == ["a"]
    assert [post.id for post in store.view().posts] == ["b", "a"]
