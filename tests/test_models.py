import pytest

from ytrss.models import Item, ItemStatus, Podcast, Usage


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("CREATED", ItemStatus.CREATED),
        ("success", ItemStatus.SUCCESS),
        (" ERROR ", ItemStatus.ERROR),
        ("QUEUED", ItemStatus.UNKNOWN),
        (None, ItemStatus.UNKNOWN),
    ],
)
def test_status_parse(raw, expected):
    assert ItemStatus.parse(raw) is expected


def test_item_from_dict_tolerates_missing_fields():
    item = Item.from_dict({"status": "CREATED"})
    assert item.is_pending
    assert (item.title, item.created, item.error) == ("", "", "")


def test_podcast_from_dict():
    assert Podcast.from_dict({"id": 7, "title": None}) == Podcast(id="7", title="")


def test_usage_ratio():
    assert Usage(512, 1024).ratio() == 0.5
    assert Usage(10, 0).ratio() == 0.0
    assert Usage(4096, 1024).ratio() == 1.0
