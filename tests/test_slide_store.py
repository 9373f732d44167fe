import pytest

from image_deck.exceptions import SlideBusyError, SlideNotFoundError
from image_deck.slide_models import SlideImage, SlideRecord, SlideStatus
from image_deck.slide_store import SlideStore


def _records(count):
    return [
        SlideRecord(slide_id=f"s{idx}", page_number=idx, title=f"Title {idx}", bullet_points=["a"])
        for idx in range(1, count + 1)
    ]


def test_list_returns_copies_in_page_order():
    store = SlideStore(reversed(_records(3)))

    slides = store.list()
    slides[0].title = "mutated"
    slides[0].bullet_points.append("leak")

    assert [slide.page_number for slide in store.list()] == [1, 2, 3]
    assert store.get("s1").title == "Title 1"
    assert store.get("s1").bullet_points == ["a"]


@pytest.mark.parametrize(
    "records",
    [
        [SlideRecord("a", 1, "A"), SlideRecord("a", 2, "B")],
        [SlideRecord("a", 1, "A"), SlideRecord("b", 3, "B")],
        [SlideRecord("a", 0, "A")],
    ],
)
def test_replace_all_rejects_invalid_decks(records):
    with pytest.raises(ValueError):
        SlideStore(records)


def test_edit_content_only_allows_content_fields():
    store = SlideStore(_records(1))

    edited = store.edit_content("s1", title="New", bullet_points=("x", "y"))

    assert edited.title == "New"
    assert store.get("s1").bullet_points == ["x", "y"]
    with pytest.raises(AttributeError):
        store.edit_content("s1", status=SlideStatus.DONE)
    with pytest.raises(AttributeError):
        store.update("s1", page_number=5)


def test_unknown_slide_raises_not_found():
    store = SlideStore(_records(1))

    with pytest.raises(SlideNotFoundError):
        store.get("missing")
    with pytest.raises(SlideNotFoundError):
        store.begin_render("missing")


def test_render_lifecycle_keeps_previous_image_until_replaced():
    store = SlideStore(_records(1))
    first = SlideImage(data=b"first")

    store.begin_render("s1")
    store.finish_success("s1", first)
    assert store.get("s1").status is SlideStatus.DONE

    rendering = store.begin_render("s1")
    assert rendering.status is SlideStatus.RENDERING
    assert store.get("s1").rendered_image == first

    store.finish_failure("s1", "boom")
    failed = store.get("s1")
    assert failed.status is SlideStatus.FAILED
    assert failed.last_error == "boom"
    assert failed.rendered_image == first

    store.begin_render("s1")
    assert store.get("s1").last_error is None
    store.finish_success("s1", SlideImage(data=b"second"))
    assert store.get("s1").rendered_image.data == b"second"


def test_begin_render_rejects_slide_already_rendering():
    store = SlideStore(_records(1))
    store.begin_render("s1")

    with pytest.raises(SlideBusyError):
        store.begin_render("s1")


def test_all_done_and_all_terminal():
    store = SlideStore(_records(2))
    assert not store.all_done()
    assert not store.all_terminal()

    store.begin_render("s1")
    store.finish_success("s1", SlideImage(data=b"img"))
    store.begin_render("s2")
    store.finish_failure("s2", "err")
    assert store.all_terminal()
    assert not store.all_done()

    store.begin_render("s2")
    store.finish_success("s2", SlideImage(data=b"img"))
    assert store.all_done()

    store.clear()
    assert len(store) == 0
    assert not store.all_done()
