import uuid

import pytest

from app.errors import (
    AuthenticationRequiredError,
    ForbiddenError,
    InvalidIdError,
    InvalidShareError,
    InvalidStatusError,
    MissingFieldsError,
    ShareNotFoundError,
)
from app.schemas.auth import Identity


def test_create_uses_caller_as_sender(service, sender, recipient):
    share = service.create(sender, "media-1", recipient.id, "hi")

    assert share.from_user_id == sender.id
    assert share.to_user_id == recipient.id
    assert share.status == "pending"


@pytest.mark.parametrize("user_id", ["user-a", "550e8400-e29b-41d4-a716-446655440009"])
def test_create_self_share_rejected(service, user_id):
    caller = Identity(id=user_id, username="someone")
    with pytest.raises(InvalidShareError):
        service.create(caller, "media-1", user_id)


@pytest.mark.parametrize("media_id,to_user_id", [(None, "user-b"), ("media-1", None), ("", "user-b")])
def test_create_missing_fields(service, sender, media_id, to_user_id):
    with pytest.raises(MissingFieldsError):
        service.create(sender, media_id, to_user_id)


def test_anonymous_caller_rejected(service, share):
    with pytest.raises(AuthenticationRequiredError):
        service.create(None, "media-1", "user-b")
    with pytest.raises(AuthenticationRequiredError):
        service.list_sent(None)
    with pytest.raises(AuthenticationRequiredError):
        service.stats(None)
    with pytest.raises(AuthenticationRequiredError):
        service.get(None, str(share.id))


def test_get_by_either_party(service, share, sender, recipient):
    assert service.get(sender, str(share.id)) is share
    assert service.get(recipient, str(share.id)) is share


def test_get_by_outsider_forbidden(service, share, outsider):
    with pytest.raises(ForbiddenError):
        service.get(outsider, str(share.id))


def test_get_invalid_id(service, sender):
    with pytest.raises(InvalidIdError):
        service.get(sender, "invalid-id")


def test_get_missing_share(service, sender):
    with pytest.raises(ShareNotFoundError):
        service.get(sender, str(uuid.uuid4()))


def test_recipient_marks_watched(service, share, recipient):
    updated = service.update_status(recipient, str(share.id), "watched")
    assert updated.status == "watched"
    assert updated.watched_at is not None


def test_sender_cannot_mark_watched(service, share, sender):
    with pytest.raises(ForbiddenError):
        service.update_status(sender, str(share.id), "watched")
    assert share.status == "pending"


def test_either_party_archives(service, share, sender, recipient):
    assert service.update_status(sender, str(share.id), "archived").status == "archived"
    assert service.update_status(recipient, str(share.id), "archived").status == "archived"


def test_outsider_cannot_archive(service, share, outsider):
    with pytest.raises(ForbiddenError):
        service.update_status(outsider, str(share.id), "archived")


def test_update_without_status_leaves_share_unchanged(service, share, sender, outsider):
    assert service.update_status(sender, str(share.id), None).status == "pending"
    with pytest.raises(ForbiddenError):
        service.update_status(outsider, str(share.id), None)


@pytest.mark.parametrize("status", ["pending", "deleted"])
def test_update_invalid_status(service, share, recipient, status):
    with pytest.raises(InvalidStatusError):
        service.update_status(recipient, str(share.id), status)


def test_update_checks_id_before_status(service, recipient):
    with pytest.raises(InvalidIdError):
        service.update_status(recipient, "invalid-id", "bogus")


def test_update_missing_share(service, recipient):
    with pytest.raises(ShareNotFoundError):
        service.update_status(recipient, str(uuid.uuid4()), "watched")


def test_delete_by_party(service, store, share, recipient):
    share_id = share.id
    service.delete(recipient, str(share_id))
    assert store.find_by_id(share_id) is None


def test_delete_by_outsider_forbidden(service, store, share, outsider):
    with pytest.raises(ForbiddenError):
        service.delete(outsider, str(share.id))
    assert store.find_by_id(share.id) is share


def test_lists_only_contain_callers_shares(service, sender, recipient, outsider):
    service.create(sender, "media-1", recipient.id)
    service.create(sender, "media-2", outsider.id)
    service.create(outsider, "media-3", recipient.id)

    sent = service.list_sent(sender)
    received = service.list_received(recipient)

    assert sent.total == 2
    assert all(s.from_user_id == sender.id for s in sent.items)
    assert received.total == 2
    assert all(s.to_user_id == recipient.id for s in received.items)


def test_list_status_filter(service, sender, recipient):
    first = service.create(sender, "media-1", recipient.id)
    service.create(sender, "media-2", recipient.id)
    service.update_status(recipient, str(first.id), "watched")

    assert service.list_sent(sender, status="watched").total == 1
    assert service.list_sent(sender, status="pending").total == 1
    assert service.list_sent(sender, status="all").total == 2
    with pytest.raises(InvalidStatusError):
        service.list_sent(sender, status="unknown")


def test_stats(service, sender, recipient):
    first = service.create(sender, "media-1", recipient.id)
    second = service.create(sender, "media-2", recipient.id)
    service.create(recipient, "media-3", sender.id)
    service.update_status(recipient, str(first.id), "watched")
    service.update_status(sender, str(second.id), "archived")

    stats = service.stats(sender)

    assert stats["sent"] == {"pending": 0, "watched": 1, "archived": 1, "total": 2}
    assert stats["received"] == {"pending": 1, "watched": 0, "archived": 0, "total": 1}
