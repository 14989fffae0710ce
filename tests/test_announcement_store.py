"""Tests for drafting and editing announcements."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError

from app.application.use_cases.announcements import (
    create_draft,
    get_announcement,
    list_announcements,
    update_announcement,
)
from app.application.use_cases.broadcasts import BroadcastOrchestrator
from app.domain.entities import (
    DEFAULT_TARGET_USER_TYPES,
    AnnouncementPriority,
    AnnouncementStatus,
    NotificationType,
)
from app.domain.exceptions import NotFoundError, TransactionFailure, ValidationError
from app.infrastructure.models import AnnouncementModel, NotificationModel
from app.infrastructure.repositories import AnnouncementRepository


def test_create_draft_returns_composed_view(session, admin_id):
    view = create_draft(
        session,
        title="Maintenance 1/15",
        content="The service will be down from 2am.",
        images=["https://cdn.example.com/a.png", "", None],
        priority="HIGH",
        target_user_types=["HOSPITAL"],
        author_id=admin_id,
    )

    assert view.title == "Maintenance 1/15"
    assert view.content == "The service will be down from 2am."
    assert view.status is AnnouncementStatus.DRAFT
    assert (view.sent_count, view.total_recipients, view.read_count) == (0, 0, 0)
    assert view.author_name == "Kim Admin"
    assert view.announcement.priority is AnnouncementPriority.HIGH
    assert view.announcement.target_user_types == ["HOSPITAL"]
    assert view.announcement.images == ["https://cdn.example.com/a.png"]
    assert view.announcement.content_type == "text"

    canonical = view.notification
    assert canonical.type is NotificationType.ANNOUNCEMENT
    assert canonical.recipient_id == admin_id
    assert canonical.sender_id == admin_id
    assert canonical.announcement_id is None


def test_create_draft_applies_defaults(session, admin_id):
    view = create_draft(session, title="Hello", content="World", author_id=admin_id)

    assert view.announcement.priority is AnnouncementPriority.NORMAL
    assert view.announcement.target_user_types == list(DEFAULT_TARGET_USER_TYPES)
    assert view.announcement.images == []


@pytest.mark.parametrize(
    ("title", "content", "priority"),
    [
        ("", "body", None),
        ("   ", "body", None),
        ("title", "", None),
        ("title", "body", "URGENT"),
    ],
)
def test_create_draft_rejects_invalid_input(session, admin_id, title, content, priority):
    with pytest.raises(ValidationError):
        create_draft(
            session, title=title, content=content, priority=priority, author_id=admin_id
        )

    assert session.query(NotificationModel).count() == 0


def test_create_draft_rejects_unknown_user_type(session, admin_id):
    with pytest.raises(ValidationError):
        create_draft(
            session,
            title="title",
            content="body",
            target_user_types=["ROBOT"],
            author_id=admin_id,
        )


def test_create_draft_is_atomic_when_second_insert_fails(session, admin_id, monkeypatch):
    def failing_create(self, announcement):
        raise OperationalError("INSERT INTO announcement", {}, Exception("disk full"))

    monkeypatch.setattr(AnnouncementRepository, "create", failing_create)

    with pytest.raises(TransactionFailure):
        create_draft(session, title="Broken", content="Never stored", author_id=admin_id)

    assert session.query(NotificationModel).count() == 0
    assert session.query(AnnouncementModel).count() == 0


def test_get_and_update_unknown_announcement(session, admin_id):
    with pytest.raises(NotFoundError):
        get_announcement(session, 999)
    with pytest.raises(NotFoundError):
        update_announcement(session, 999, title="Nope")


def test_update_announcement_changes_canonical_and_metadata(session, admin_id):
    view = create_draft(session, title="Old", content="Old body", author_id=admin_id)

    updated = update_announcement(
        session,
        view.id,
        title="New",
        content="New body",
        priority="low",
        images=["x.png", "x.png"],
    )

    assert updated.title == "New"
    assert updated.content == "New body"
    assert updated.announcement.priority is AnnouncementPriority.LOW
    assert updated.announcement.images == ["x.png"]
    assert get_announcement(session, view.id).title == "New"


def test_update_after_send_keeps_delivered_copies(session, admin_id, members):
    view = create_draft(session, title="Original", content="Original body", author_id=admin_id)
    BroadcastOrchestrator(max_workers=2).dispatch(session, announcement_id=view.id)

    update_announcement(session, view.id, title="Edited", content="Edited body")

    copies = (
        session.query(NotificationModel)
        .filter(NotificationModel.announcement_id == view.id)
        .all()
    )
    assert len(copies) == len(members)
    assert {copy.title for copy in copies} == {"Original"}
    assert get_announcement(session, view.id).title == "Edited"


def test_list_announcements_newest_first(session, admin_id):
    first = create_draft(session, title="First", content="1", author_id=admin_id)
    second = create_draft(session, title="Second", content="2", author_id=admin_id)

    views = list_announcements(session)

    assert [view.id for view in views] == [second.id, first.id]


def test_update_is_atomic_when_metadata_write_fails(session, admin_id, monkeypatch):
    view = create_draft(session, title="Old", content="Old body", author_id=admin_id)

    def failing_update(self, announcement):
        raise OperationalError("UPDATE announcement", {}, Exception("disk full"))

    monkeypatch.setattr(AnnouncementRepository, "update_metadata", failing_update)

    with pytest.raises(TransactionFailure):
        update_announcement(session, view.id, title="New", content="New body", priority="LOW")

    session.expire_all()
    canonical = session.get(NotificationModel, view.notification.id)
    assert canonical.title == "Old"
    assert canonical.content == "Old body"
    assert session.get(AnnouncementModel, view.id).priority == AnnouncementPriority.NORMAL.value
