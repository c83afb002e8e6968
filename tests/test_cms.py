"""
B.I Booster Backend — CMS Tests
=================================

Admin course editor: building the module → chapter → lesson tree,
partial updates, publish toggles and media uploads.
"""

from unittest.mock import patch

import pytest

from bibooster.config import settings
from bibooster.services.file_service import FileService

CMS = "/api/admin/cms"


async def build_tree(client, headers):
    module = (await client.post(f"{CMS}/modules", json={"title": "Dasar Bisnis Online"}, headers=headers)).json()
    chapter = (
        await client.post(
            f"{CMS}/modules/{module['id']}/chapters",
            json={"title": "Mengenal Pasar", "order_index": 1},
            headers=headers,
        )
    ).json()
    lesson = (
        await client.post(
            f"{CMS}/chapters/{chapter['id']}/lessons",
            json={"title": "Riset Kompetitor", "duration_minutes": 15},
            headers=headers,
        )
    ).json()
    return module, chapter, lesson


class TestCmsAuth:

    @pytest.mark.asyncio
    async def test_requires_admin_key(self, test_client):
        response = await test_client.get(f"{CMS}/modules")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_member_token_is_not_enough(self, test_client, create_member):
        _, headers = await create_member(tier="enterprise")
        response = await test_client.post(f"{CMS}/modules", json={"title": "x"}, headers=headers)
        assert response.status_code == 401


class TestCourseTree:

    @pytest.mark.asyncio
    async def test_create_tree_defaults(self, test_client, admin_headers):
        module, chapter, lesson = await build_tree(test_client, admin_headers)

        assert module["is_published"] is False
        assert module["chapters"] == []
        assert chapter["module_id"] == module["id"]
        assert chapter["order_index"] == 1
        assert lesson["chapter_id"] == chapter["id"]
        assert lesson["difficulty"] == "basic"
        assert lesson["required_package"] == ["small"]
        assert lesson["is_published"] is False

    @pytest.mark.asyncio
    async def test_list_tree_includes_drafts_in_order(self, test_client, admin_headers):
        await test_client.post(f"{CMS}/modules", json={"title": "Kedua", "order_index": 2}, headers=admin_headers)
        module, chapter, lesson = await build_tree(test_client, admin_headers)

        response = await test_client.get(f"{CMS}/modules", headers=admin_headers)
        assert response.status_code == 200
        modules = response.json()["modules"]
        assert [m["title"] for m in modules] == ["Dasar Bisnis Online", "Kedua"]
        assert modules[0]["chapters"][0]["id"] == chapter["id"]
        assert modules[0]["chapters"][0]["lessons"][0]["id"] == lesson["id"]

    @pytest.mark.asyncio
    async def test_chapter_for_unknown_module(self, test_client, admin_headers):
        response = await test_client.post(
            f"{CMS}/modules/00000000-0000-0000-0000-000000000000/chapters",
            json={"title": "Yatim"},
            headers=admin_headers,
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_lesson_for_unknown_chapter(self, test_client, admin_headers):
        response = await test_client.post(
            f"{CMS}/chapters/00000000-0000-0000-0000-000000000000/lessons",
            json={"title": "Yatim"},
            headers=admin_headers,
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_lesson_rejects_unknown_tier(self, test_client, admin_headers):
        _, chapter, _ = await build_tree(test_client, admin_headers)
        response = await test_client.post(
            f"{CMS}/chapters/{chapter['id']}/lessons",
            json={"title": "Rahasia", "required_package": ["platinum"]},
            headers=admin_headers,
        )
        assert response.status_code == 422


class TestPartialUpdates:

    @pytest.mark.asyncio
    async def test_publish_toggle_leaves_title(self, test_client, admin_headers):
        module, _, _ = await build_tree(test_client, admin_headers)
        response = await test_client.patch(
            f"{CMS}/modules/{module['id']}", json={"is_published": True}, headers=admin_headers
        )
        assert response.status_code == 200
        body = response.json()
        assert body["is_published"] is True
        assert body["title"] == "Dasar Bisnis Online"
        assert len(body["chapters"]) == 1

    @pytest.mark.asyncio
    async def test_null_title_is_ignored(self, test_client, admin_headers):
        _, chapter, _ = await build_tree(test_client, admin_headers)
        response = await test_client.patch(
            f"{CMS}/chapters/{chapter['id']}",
            json={"title": None, "description": "Baru"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["title"] == "Mengenal Pasar"
        assert response.json()["description"] == "Baru"

    @pytest.mark.asyncio
    async def test_lesson_update(self, test_client, admin_headers):
        _, _, lesson = await build_tree(test_client, admin_headers)
        response = await test_client.patch(
            f"{CMS}/lessons/{lesson['id']}",
            json={
                "difficulty": "large",
                "required_package": ["Large", "enterprise", "large"],
                "video_url": "https://video.example.com/riset.mp4",
            },
            headers=admin_headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["difficulty"] == "large"
        assert body["required_package"] == ["large", "enterprise"]
        assert body["video_url"] == "https://video.example.com/riset.mp4"
        assert body["title"] == "Riset Kompetitor"

    @pytest.mark.asyncio
    async def test_update_unknown_lesson(self, test_client, admin_headers):
        response = await test_client.patch(
            f"{CMS}/lessons/00000000-0000-0000-0000-000000000000",
            json={"title": "x"},
            headers=admin_headers,
        )
        assert response.status_code == 404


class TestMediaUpload:

    @pytest.mark.asyncio
    async def test_upload_material(self, test_client, admin_headers):
        with patch.object(FileService, "validate_mime_type", return_value="application/pdf"):
            response = await test_client.post(
                f"{CMS}/media",
                files={"file": ("modul 1.pdf", b"%PDF-1.4 materi", "application/pdf")},
                data={"kind": "material"},
                headers=admin_headers,
            )
        assert response.status_code == 201
        body = response.json()
        assert body["kind"] == "material"
        assert body["path"].startswith("materials/") and body["path"].endswith(".pdf")
        assert body["url"] == f"http://test/api/files/{body['path']}"
        assert body["size"] == len(b"%PDF-1.4 materi")

        served = await test_client.get(f"/api/files/{body['path']}")
        assert served.status_code == 200
        assert served.headers["content-type"] == "application/pdf"

    @pytest.mark.asyncio
    async def test_upload_exactly_at_size_limit(self, test_client, admin_headers):
        content = b"%PDF" + b"x" * 1020
        with patch.object(settings, "max_file_size", len(content)), patch.object(
            FileService, "validate_mime_type", return_value="application/pdf"
        ):
            accepted = await test_client.post(
                f"{CMS}/media",
                files={"file": ("pas.pdf", content, "application/pdf")},
                data={"kind": "material"},
                headers=admin_headers,
            )
            rejected = await test_client.post(
                f"{CMS}/media",
                files={"file": ("lebih.pdf", content + b"x", "application/pdf")},
                data={"kind": "material"},
                headers=admin_headers,
            )
        assert accepted.status_code == 201
        assert accepted.json()["size"] == len(content)
        assert rejected.status_code == 400

    @pytest.mark.asyncio
    async def test_upload_video_wrong_extension(self, test_client, admin_headers):
        response = await test_client.post(
            f"{CMS}/media",
            files={"file": ("slides.pptx", b"PK\x03\x04", "application/octet-stream")},
            data={"kind": "video"},
            headers=admin_headers,
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_upload_unknown_kind(self, test_client, admin_headers):
        response = await test_client.post(
            f"{CMS}/media",
            files={"file": ("a.pdf", b"%PDF", "application/pdf")},
            data={"kind": "avatar"},
            headers=admin_headers,
        )
        assert response.status_code == 422


class TestStoredFiles:

    @pytest.mark.asyncio
    async def test_missing_file(self, test_client):
        response = await test_client.get("/api/files/materials/nothing-here.pdf")
        assert response.status_code == 404
