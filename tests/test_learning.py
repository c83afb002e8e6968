"""
B.I Booster Backend — Member LMS Tests
========================================

Published-only course view, package locks, progress upserts and the
dashboard summary.
"""

import pytest

CMS = "/api/admin/cms"
LMS = "/api/lms"


@pytest.fixture
def seed_course(test_client, admin_headers):
    """
    Builds:
        Strategi Digital (published)
        ├── Fondasi (published)
        │   ├── Profil Bisnis        small, published
        │   ├── SEO Lanjutan         medium+, published
        │   └── Draft                small, unpublished
        └── Segera Hadir (unpublished)
            └── Tersembunyi          small, published
        Modul Draft (unpublished)
    """

    async def _seed():
        async def post(path, payload):
            response = await test_client.post(f"{CMS}{path}", json=payload, headers=admin_headers)
            assert response.status_code == 201, response.text
            return response.json()

        module = await post("/modules", {"title": "Strategi Digital", "is_published": True})
        await post("/modules", {"title": "Modul Draft", "order_index": 5})
        chapter = await post(
            f"/modules/{module['id']}/chapters", {"title": "Fondasi", "is_published": True}
        )
        hidden_chapter = await post(
            f"/modules/{module['id']}/chapters", {"title": "Segera Hadir", "order_index": 1}
        )
        lessons = {
            "basic": await post(
                f"/chapters/{chapter['id']}/lessons",
                {
                    "title": "Profil Bisnis",
                    "content": "Isi materi dasar",
                    "video_url": "https://video.example.com/profil.mp4",
                    "duration_minutes": 20,
                    "is_published": True,
                },
            ),
            "premium": await post(
                f"/chapters/{chapter['id']}/lessons",
                {
                    "title": "SEO Lanjutan",
                    "content": "Isi materi premium",
                    "materials_url": "https://files.example.com/seo.pdf",
                    "order_index": 1,
                    "is_published": True,
                    "required_package": ["medium", "large", "enterprise"],
                },
            ),
            "draft": await post(
                f"/chapters/{chapter['id']}/lessons",
                {"title": "Draft", "order_index": 2},
            ),
            "hidden": await post(
                f"/chapters/{hidden_chapter['id']}/lessons",
                {"title": "Tersembunyi", "is_published": True},
            ),
        }
        return lessons

    return _seed


class TestCourseView:

    @pytest.mark.asyncio
    async def test_requires_login(self, test_client):
        response = await test_client.get(f"{LMS}/course")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_only_published_content(self, test_client, create_member, seed_course):
        lessons = await seed_course()
        _, headers = await create_member(tier="small")

        response = await test_client.get(f"{LMS}/course", headers=headers)
        assert response.status_code == 200
        assert response.headers["cache-control"] == "private, no-store"
        body = response.json()
        assert body["package_access"] == "small"
        assert [m["title"] for m in body["modules"]] == ["Strategi Digital"]
        chapters = body["modules"][0]["chapters"]
        assert [c["title"] for c in chapters] == ["Fondasi"]
        assert [lesson["id"] for lesson in chapters[0]["lessons"]] == [
            lessons["basic"]["id"],
            lessons["premium"]["id"],
        ]

    @pytest.mark.asyncio
    async def test_locked_lesson_hides_content(self, test_client, create_member, seed_course):
        await seed_course()
        _, headers = await create_member(tier="small")

        body = (await test_client.get(f"{LMS}/course", headers=headers)).json()
        basic, premium = body["modules"][0]["chapters"][0]["lessons"]
        assert basic["locked"] is False
        assert basic["content"] == "Isi materi dasar"
        assert basic["video_url"] == "https://video.example.com/profil.mp4"
        assert premium["locked"] is True
        assert premium["content"] is None
        assert premium["materials_url"] is None
        assert premium["required_package"] == ["medium", "large", "enterprise"]

    @pytest.mark.asyncio
    async def test_unpaid_order_does_not_unlock(self, test_client, create_member, seed_course):
        await seed_course()
        _, headers = await create_member(tier="small", email="anggota@example.com")

        response = await test_client.post(
            "/api/orders",
            json={
                "package_id": "enterprise",
                "template_name": "Toko Kue",
                "name": "Orang Lain",
                "email": "anggota@example.com",
                "phone": "081200000000",
            },
        )
        assert response.status_code == 201

        body = (await test_client.get(f"{LMS}/course", headers=headers)).json()
        assert body["package_access"] == "small"
        premium = body["modules"][0]["chapters"][0]["lessons"][1]
        assert premium["locked"] is True
        assert premium["content"] is None

    @pytest.mark.asyncio
    async def test_higher_tier_unlocks(self, test_client, create_member, seed_course):
        await seed_course()
        _, headers = await create_member(tier="enterprise")

        body = (await test_client.get(f"{LMS}/course", headers=headers)).json()
        premium = body["modules"][0]["chapters"][0]["lessons"][1]
        assert premium["locked"] is False
        assert premium["materials_url"] == "https://files.example.com/seo.pdf"


class TestProgress:

    @pytest.mark.asyncio
    async def test_complete_lesson(self, test_client, create_member, seed_course):
        lessons = await seed_course()
        _, headers = await create_member(tier="small")

        response = await test_client.post(
            f"{LMS}/lessons/{lessons['basic']['id']}/progress",
            json={"completed": True, "watch_time_minutes": 18},
            headers=headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["completed"] is True
        assert body["completion_date"] is not None
        assert body["watch_time_minutes"] == 18

        course = (await test_client.get(f"{LMS}/course", headers=headers)).json()
        chapter = course["modules"][0]["chapters"][0]
        assert chapter["lessons"][0]["completed"] is True
        assert chapter["completed_lessons"] == 1
        assert chapter["total_lessons"] == 2
        assert chapter["progress_percent"] == 50

    @pytest.mark.asyncio
    async def test_repeat_completion_keeps_date_and_time(self, test_client, create_member, seed_course):
        lessons = await seed_course()
        _, headers = await create_member(tier="small")
        url = f"{LMS}/lessons/{lessons['basic']['id']}/progress"

        first = (await test_client.post(url, json={"watch_time_minutes": 10}, headers=headers)).json()
        second = (await test_client.post(url, json={}, headers=headers)).json()
        assert second["completed"] is True
        # SQLite hands the timestamp back without its UTC offset
        assert second["completion_date"][:19] == first["completion_date"][:19]
        assert second["watch_time_minutes"] == 10

    @pytest.mark.asyncio
    async def test_mark_incomplete_clears_date(self, test_client, create_member, seed_course):
        lessons = await seed_course()
        _, headers = await create_member(tier="small")
        url = f"{LMS}/lessons/{lessons['basic']['id']}/progress"

        await test_client.post(url, json={"completed": True}, headers=headers)
        response = await test_client.post(url, json={"completed": False}, headers=headers)
        assert response.status_code == 200
        assert response.json()["completed"] is False
        assert response.json()["completion_date"] is None

    @pytest.mark.asyncio
    async def test_locked_lesson_refused(self, test_client, create_member, seed_course):
        lessons = await seed_course()
        _, headers = await create_member(tier="small")
        response = await test_client.post(
            f"{LMS}/lessons/{lessons['premium']['id']}/progress", json={}, headers=headers
        )
        assert response.status_code == 403
        assert response.json()["details"]["required_package"] == ["medium", "large", "enterprise"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("key", ["draft", "hidden"])
    async def test_unpublished_lessons_not_found(self, test_client, create_member, seed_course, key):
        lessons = await seed_course()
        _, headers = await create_member(tier="enterprise")
        response = await test_client.post(
            f"{LMS}/lessons/{lessons[key]['id']}/progress", json={}, headers=headers
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_unknown_lesson(self, test_client, create_member):
        _, headers = await create_member()
        response = await test_client.post(
            f"{LMS}/lessons/00000000-0000-0000-0000-000000000000/progress", json={}, headers=headers
        )
        assert response.status_code == 404


class TestSummary:

    @pytest.mark.asyncio
    async def test_empty_summary(self, test_client, create_member):
        _, headers = await create_member(tier="medium")
        response = await test_client.get(f"{LMS}/summary", headers=headers)
        assert response.status_code == 200
        assert response.json() == {
            "package_access": "medium",
            "progress_percent": 0,
            "completed_lessons": 0,
            "total_lessons": 0,
            "completed_chapters": 0,
            "total_chapters": 0,
            "study_hours": 0.0,
        }

    @pytest.mark.asyncio
    async def test_summary_counts_unlocked_lessons_only(self, test_client, create_member, seed_course):
        lessons = await seed_course()
        _, headers = await create_member(tier="small")
        await test_client.post(
            f"{LMS}/lessons/{lessons['basic']['id']}/progress",
            json={"watch_time_minutes": 45},
            headers=headers,
        )

        summary = (await test_client.get(f"{LMS}/summary", headers=headers)).json()
        assert summary["total_lessons"] == 1
        assert summary["completed_lessons"] == 1
        assert summary["progress_percent"] == 100
        assert summary["total_chapters"] == 1
        # The chapter still holds a locked lesson, so it is not complete
        assert summary["completed_chapters"] == 0
        assert summary["study_hours"] == 0.8

    @pytest.mark.asyncio
    async def test_completed_chapter(self, test_client, create_member, seed_course):
        lessons = await seed_course()
        _, headers = await create_member(tier="medium")
        for key in ("basic", "premium"):
            await test_client.post(
                f"{LMS}/lessons/{lessons[key]['id']}/progress", json={}, headers=headers
            )

        summary = (await test_client.get(f"{LMS}/summary", headers=headers)).json()
        assert summary["progress_percent"] == 100
        assert summary["completed_chapters"] == 1

    @pytest.mark.asyncio
    async def test_study_hours_skip_unpublished_lessons(
        self, test_client, create_member, seed_course, admin_headers
    ):
        lessons = await seed_course()
        _, headers = await create_member(tier="medium")
        for key, minutes in (("basic", 45), ("premium", 30)):
            await test_client.post(
                f"{LMS}/lessons/{lessons[key]['id']}/progress",
                json={"watch_time_minutes": minutes},
                headers=headers,
            )

        await test_client.patch(
            f"{CMS}/lessons/{lessons['premium']['id']}",
            json={"is_published": False},
            headers=admin_headers,
        )

        summary = (await test_client.get(f"{LMS}/summary", headers=headers)).json()
        assert summary["total_lessons"] == 1
        assert summary["study_hours"] == 0.8
