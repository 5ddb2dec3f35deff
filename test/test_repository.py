# test/test_repository.py
import pytest
from sqlalchemy import func, select

from crud_blog.errors import NotFound, NotPersisted
from crud_blog.store import Comment


@pytest.mark.asyncio
async def test_create_returns_id_and_timestamps(repo):
    post = await repo.create({"title": "Hello", "body": "World"})

    assert post.id is not None
    assert post.created_at is not None
    assert post.updated_at == post.created_at

    found = await repo.find(post.id)
    assert found.title == "Hello"
    assert found.body == "World"


@pytest.mark.asyncio
async def test_create_ignores_fields_outside_fillable(repo):
    """Mass assignment: id and timestamps can't be set by the caller"""
    post = await repo.create(
        {"title": "Hello", "body": "World", "id": 42, "created_at": None, "author": "x"}
    )

    assert post.id != 42
    assert post.created_at is not None
    assert not hasattr(post, "author")


@pytest.mark.asyncio
async def test_failed_create_leaves_nothing_behind(repo):
    with pytest.raises(NotPersisted):
        await repo.create({"title": None, "body": "World"})

    assert await repo.count() == 0


@pytest.mark.asyncio
async def test_find_missing_raises_not_found(repo):
    with pytest.raises(NotFound) as excinfo:
        await repo.find(999)
    assert str(excinfo.value) == "Post 999 not found"


@pytest.mark.asyncio
async def test_update_scenario(repo):
    """create -> update(title) -> delete, as walked through in the README"""
    post = await repo.create({"title": "Hello", "body": "World"})
    created_at = post.created_at
    first_updated_at = post.updated_at

    updated = await repo.update(post.id, {"title": "Hi"})

    assert updated.id == post.id
    assert updated.title == "Hi"
    assert updated.body == "World"
    assert updated.created_at == created_at
    assert updated.updated_at > first_updated_at

    await repo.delete(post.id)
    with pytest.raises(NotFound):
        await repo.find(post.id)


@pytest.mark.asyncio
async def test_update_ignores_fields_outside_fillable(repo):
    post = await repo.create({"title": "Hello", "body": "World"})
    original_id = post.id
    created_at = post.created_at

    await repo.update(post.id, {"id": 77, "created_at": None, "body": "Everyone"})

    found = await repo.find(original_id)
    assert found.body == "Everyone"
    assert found.created_at == created_at


@pytest.mark.asyncio
async def test_update_missing_raises_and_changes_nothing(repo):
    await repo.create({"title": "Hello", "body": "World"})

    with pytest.raises(NotFound):
        await repo.update(999, {"title": "Hi"})

    posts = await repo.list()
    assert [(p.title, p.body) for p in posts] == [("Hello", "World")]


@pytest.mark.asyncio
async def test_delete_missing_raises_not_found(repo):
    with pytest.raises(NotFound):
        await repo.delete(1)


@pytest.mark.asyncio
async def test_list_is_insertion_ordered_and_paginates(repo):
    for i in range(5):
        await repo.create({"title": f"Post {i}", "body": "..."})

    assert [p.title for p in await repo.list()] == [f"Post {i}" for i in range(5)]
    assert [p.title for p in await repo.list(offset=2, limit=2)] == ["Post 2", "Post 3"]
    assert await repo.count() == 5


@pytest.mark.asyncio
async def test_comments_are_deleted_with_their_post(repo, db_session):
    post = await repo.create({"title": "Hello", "body": "World"})
    await repo.add_comment(post.id, {"body": "First!"})
    await repo.add_comment(post.id, {"body": "Second"})

    assert [c.body for c in await repo.comments(post.id)] == ["First!", "Second"]

    await repo.delete(post.id)

    remaining = await db_session.execute(select(func.count()).select_from(Comment))
    assert remaining.scalar_one() == 0


@pytest.mark.asyncio
async def test_comment_on_missing_post_raises_not_found(repo):
    with pytest.raises(NotFound):
        await repo.add_comment(5, {"body": "Anyone?"})


@pytest.mark.asyncio
async def test_failed_update_leaves_post_unchanged(repo):
    post = await repo.create({"title": "Hello", "body": "World"})
    post_id = post.id

    with pytest.raises(NotPersisted):
        await repo.update(post_id, {"title": None})

    found = await repo.find(post_id)
    assert (found.title, found.body) == ("Hello", "World")


@pytest.mark.asyncio
@pytest.mark.parametrize("post_id", [0, -1, 2**63, 99999999999999999999])
async def test_out_of_range_ids_are_not_found(repo, post_id):
    with pytest.raises(NotFound):
        await repo.find(post_id)
    with pytest.raises(NotFound):
        await repo.delete(post_id)


@pytest.mark.asyncio
async def test_list_past_the_last_row_is_empty(repo):
    await repo.create({"title": "Hello", "body": "World"})

    assert await repo.list(offset=99999999999999999999, limit=3) == []
