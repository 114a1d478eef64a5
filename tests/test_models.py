from __future__ import annotations

import sys
from pathlib import Path

import pytest

# make the site_backend package importable for local test runs
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from site_backend.core.errors import InvalidInputError  # noqa: E402
from site_backend.domain.blog import BlogPost, BlogStatus, NewBlogPost  # noqa: E402
from site_backend.domain.files import FileDetails  # noqa: E402
from site_backend.domain.validation import is_str, json_errors  # noqa: E402
from site_backend.domain.vice_bank import Action, Purchase  # noqa: E402

PURCHASE_JSON = {
    "id": "id",
    "vbUserId": "userId",
    "purchasePriceId": "purchasePriceId",
    "date": "2023-02-25T00:00:00.000-06:00",
    "purchasedQuantity": 1,
}

ACTION_JSON = {
    "id": "id",
    "vbUserId": "userId",
    "name": "Exercise",
    "conversionUnit": "minutes",
    "depositsPer": 30,
    "tokensPer": 1,
    "minDeposit": 10,
    "maxDeposit": 120,
}


def test_purchase_to_json_preserves_offset_and_milliseconds():
    purchase = Purchase.from_json(PURCHASE_JSON)

    assert purchase.to_json() == PURCHASE_JSON
    assert purchase.date.utcoffset().total_seconds() == -6 * 3600


@pytest.mark.parametrize("missing", sorted(PURCHASE_JSON))
def test_purchase_from_json_rejects_missing_fields(missing):
    invalid = {k: v for k, v in PURCHASE_JSON.items() if k != missing}

    with pytest.raises(InvalidInputError) as exc_info:
        Purchase.from_json(invalid)
    assert exc_info.value.fields == [missing]


@pytest.mark.parametrize("value", ["invalidInput", 1, True, [], None])
def test_json_errors_reports_root_for_non_objects(value):
    assert json_errors(value, {"id": is_str}) == ["root"]
    with pytest.raises(InvalidInputError):
        Action.from_json(value)


def test_action_tokens_respect_min_and_max_deposit():
    action = Action.from_json(ACTION_JSON)

    assert action.tokens_for(60) == pytest.approx(2)
    assert action.tokens_for(600) == pytest.approx(4)
    with pytest.raises(InvalidInputError):
        action.tokens_for(5)


def test_new_blog_post_defaults_to_draft_and_validates_slug():
    raw = {"title": "T", "slug": "hello-world", "body": "b", "tags": ["a"], "authorId": "admin"}

    assert NewBlogPost.from_json(raw).status == BlogStatus.DRAFT
    with pytest.raises(InvalidInputError) as exc_info:
        NewBlogPost.from_json({**raw, "slug": "Not A Slug"})
    assert exc_info.value.fields == ["slug"]


def test_blog_post_from_new_post_gets_id_and_date():
    new_post = NewBlogPost(title="T", slug="t", body="b", tags=[], author_id="admin")

    post = BlogPost.from_new_blog_post("id1", new_post)
    restored = BlogPost.from_json(post.to_json())

    assert post.id == "id1"
    assert restored.to_json() == post.to_json()
    assert "dateUpdated" not in post.to_json()


def test_file_details_requires_boolean_privacy():
    raw = {
        "id": "id1",
        "originalFilename": "photo.jpg",
        "filename": "id1.jpg",
        "dateAdded": "2024-01-01T00:00:00.000Z",
        "authorId": "admin",
        "mimetype": "image/jpeg",
        "size": 1024,
        "isPrivate": "yes",
    }

    with pytest.raises(InvalidInputError) as exc_info:
        FileDetails.from_json(raw)
    assert exc_info.value.fields == ["isPrivate"]
    assert FileDetails.from_json({**raw, "isPrivate": False}).metadata == {}
