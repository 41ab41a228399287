from __future__ import annotations

import pytest

from studio.errors import NotFoundError, StorageIOError, ValidationError
from studio.pipelines.media_bound import Attachment

pytestmark = pytest.mark.asyncio

PROJECT = {"title": "Alpha", "category": "branding", "description": "Identity for Alpha"}


async def test_create_then_delete_removes_file(container, png_bytes):
    project = await container.project_manager.create_with_media(PROJECT, Attachment("alpha.png", png_bytes))
    path = container.media.path_for(project.image_ref)
    assert path.read_bytes() == png_bytes

    await container.project_manager.delete_with_media(project.id)

    assert not path.exists()
    assert await container.projects.count() == 0


async def test_create_without_file_never_touches_media(container, monkeypatch):
    calls = []

    async def tracking_delete(reference):
        calls.append(reference)

    monkeypatch.setattr(container.media, "delete", tracking_delete)

    post = await container.post_manager.create_with_media(
        {"title": "Hello", "category": "news", "content": "First post", "author": "Sam"}
    )
    assert post.image_ref is None

    await container.post_manager.delete_with_media(post.id)
    assert calls == []
    assert await container.posts.count() == 0


async def test_delete_unknown_id(container):
    with pytest.raises(NotFoundError):
        await container.team_manager.delete_with_media("missing")


async def test_delete_tolerates_already_missing_file(container, png_bytes):
    member = await container.team_manager.create_with_media(
        {"name": "Kim", "role": "Designer", "bio": "Type nerd", "social": {}},
        Attachment("kim.jpg", png_bytes),
    )
    container.media.path_for(member.image_ref).unlink()

    await container.team_manager.delete_with_media(member.id)
    assert await container.team.count() == 0


async def test_failed_file_delete_preserves_record(container, png_bytes):
    project = await container.project_manager.create_with_media(PROJECT, Attachment("alpha.png", png_bytes))
    path = container.media.path_for(project.image_ref)
    path.unlink()
    path.mkdir()

    with pytest.raises(StorageIOError):
        await container.project_manager.delete_with_media(project.id)

    still_there = await container.projects.get(project.id)
    assert still_there.image_ref == project.image_ref


async def test_failed_record_create_discards_stored_file(container, png_bytes):
    with pytest.raises(ValidationError):
        await container.project_manager.create_with_media(
            {**PROJECT, "unexpected": "field"},
            Attachment("alpha.png", png_bytes),
        )

    assert list(container.media.root.iterdir()) == []
    assert await container.projects.count() == 0


async def test_rejected_file_creates_no_record(container):
    with pytest.raises(ValidationError):
        await container.project_manager.create_with_media(PROJECT, Attachment("alpha.exe", b"MZ"))
    assert await container.projects.count() == 0
