"""
Tests for AnnouncementService.
"""

import pytest

from guildhall.modules.shared.exceptions import NotFoundError, ValidationError


@pytest.mark.unit
@pytest.mark.database
class TestAnnouncements:
    async def test_create(self, announcement_service, make_user, published_events):
        officer = await make_user(guild_role="guild_master")
        published_events.clear()

        announcement = await announcement_service.create_announcement(
            "Raid night moved", "Nest runs start at 21:00 this week.", officer.id
        )

        assert announcement.title == "Raid night moved"
        assert announcement.created_by == officer.id
        assert published_events == [
            {
                "name": "announcement.created",
                "data": {
                    "announcement_id": announcement.id,
                    "created_by": officer.id,
                    "title": "Raid night moved",
                },
            }
        ]

    @pytest.mark.parametrize(
        "title,content,field",
        [
            ("", "Body", "title"),
            ("t" * 101, "Body", "title"),
            ("Title", "   ", "content"),
            ("Title", "c" * 2001, "content"),
        ],
    )
    async def test_bounds(self, announcement_service, make_user, title, content, field):
        officer = await make_user()

        with pytest.raises(ValidationError) as exc_info:
            await announcement_service.create_announcement(title, content, officer.id)

        assert exc_info.value.field == field

    async def test_missing_creator(self, announcement_service, database):
        with pytest.raises(NotFoundError, match="Creator user does not exist"):
            await announcement_service.create_announcement("Title", "Body", 2024)

    async def test_recent_newest_first_and_limited(self, announcement_service, make_user):
        officer = await make_user()
        for n in range(12):
            await announcement_service.create_announcement(f"Notice {n}", "Body", officer.id)

        recent = await announcement_service.get_recent_announcements()

        assert len(recent) == 10
        assert recent[0].title == "Notice 11"
        assert recent[-1].title == "Notice 2"

        latest_three = await announcement_service.get_recent_announcements(limit=3)
        assert [a.title for a in latest_three] == ["Notice 11", "Notice 10", "Notice 9"]

    async def test_limit_bounds(self, announcement_service, database):
        with pytest.raises(ValidationError):
            await announcement_service.get_recent_announcements(limit=0)
