import pytest

from domain.models import Destination
from services.destination_pages import distinct_categories, paginate_destinations


def _dests(*categories):
    return [Destination(id=i, category=c) for i, c in enumerate(categories)]


def test_distinct_categories_keeps_first_seen_order():
    assert distinct_categories(_dests("park", "museum", "park", "cafe")) == ["park", "museum", "cafe"]


def test_pages_cover_everything_once():
    items = _dests(*["museum"] * 45)
    pages = [paginate_destinations(items, page=p, page_size=21) for p in (1, 2, 3)]

    assert [len(p.destinations) for p in pages] == [21, 21, 3]
    assert all(p.total_pages == 3 for p in pages)
    ids = [d.id for p in pages for d in p.destinations]
    assert ids == list(range(45))


def test_page_past_the_end_is_empty():
    page = paginate_destinations(_dests("museum"), page=4, page_size=21)
    assert page.destinations == []
    assert page.total == 1


def test_unknown_category_filters_everything_out():
    page = paginate_destinations(_dests("museum", "park"), category="zoo")
    assert page.total == 0
    assert page.total_pages == 0
    assert page.categories == ["museum", "park"]


def test_rejects_bad_paging():
    with pytest.raises(ValueError):
        paginate_destinations([], page=0)
    with pytest.raises(ValueError):
        paginate_destinations([], page_size=0)
