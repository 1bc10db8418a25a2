"""Submission gatekeeper and review queries at the service level."""
from datetime import timedelta

import pytest
from sqlalchemy import func, select

from conftest import full_scores
from reviewly.constants import DUPLICATE_REVIEW_MESSAGE
from reviewly.errors import DuplicateReviewError, NotFoundError, ValidationError
from reviewly.models import Review
from reviewly.services import review_service, staff_service

ADDRESS = "203.0.113.5"


@pytest.fixture
def two_staff(session):
    first = staff_service.create_staff(session, {"name": "Ana", "gender": "mesera"})
    second = staff_service.create_staff(session, {"name": "Luis", "gender": "mesero"})
    return first, second


def submit(session, staff_id, now, address=ADDRESS, **extra):
    payload = {"staff_id": staff_id, "ratings": full_scores(5, presentation=4)}
    payload.update(extra)
    return review_service.submit_review(session, payload, address, now=now)


def review_count(session):
    return session.scalar(select(func.count()).select_from(Review))


class TestGatekeeper:

    def test_accepts_first_review_and_computes_rating(self, session, two_staff, sample_now):
        review = submit(session, two_staff[0]["id"], sample_now)
        assert review["rating"] == 4.8
        assert review["staff_id"] == two_staff[0]["id"]
        assert "ip_address" not in review

        stored = session.get(Review, review["id"])
        assert stored.ip_address == ADDRESS
        assert stored.created_at == sample_now

    def test_blocks_same_address_across_staff_inside_window(
        self, session, two_staff, sample_now
    ):
        submit(session, two_staff[0]["id"], sample_now)

        later = sample_now + timedelta(hours=23, minutes=59)
        with pytest.raises(DuplicateReviewError) as exc_info:
            submit(session, two_staff[1]["id"], later)
        assert exc_info.value.message == DUPLICATE_REVIEW_MESSAGE
        assert int(exc_info.value.status) == 429
        assert review_count(session) == 1

    def test_accepts_again_after_window(self, session, two_staff, sample_now):
        submit(session, two_staff[0]["id"], sample_now)

        later = sample_now + timedelta(hours=24, minutes=1)
        submit(session, two_staff[1]["id"], later)
        assert review_count(session) == 2

    def test_other_addresses_are_not_blocked(self, session, two_staff, sample_now):
        submit(session, two_staff[0]["id"], sample_now)
        submit(session, two_staff[0]["id"], sample_now, address="198.51.100.9")
        assert review_count(session) == 2

    def test_is_blocked_and_check_duplicate(self, session, two_staff, sample_now):
        assert review_service.is_blocked(session, ADDRESS, sample_now) is False
        assert review_service.check_duplicate(session, ADDRESS, sample_now) == {"duplicate": False}

        submit(session, two_staff[0]["id"], sample_now)
        assert review_service.is_blocked(session, ADDRESS, sample_now + timedelta(hours=1))
        with pytest.raises(DuplicateReviewError):
            review_service.check_duplicate(session, ADDRESS, sample_now + timedelta(hours=1))

    def test_window_is_configurable(self, session, two_staff, sample_now):
        submit(session, two_staff[0]["id"], sample_now)
        later = sample_now + timedelta(hours=2)
        assert review_service.is_blocked(session, ADDRESS, later, window_hours=1) is False

    def test_duplicate_is_checked_before_validation(self, session, two_staff, sample_now):
        submit(session, two_staff[0]["id"], sample_now)
        with pytest.raises(DuplicateReviewError):
            review_service.submit_review(
                session, {"staff_id": 9999, "ratings": {}}, ADDRESS, now=sample_now
            )

    def test_missing_staff_id(self, session, sample_now):
        with pytest.raises(ValidationError):
            review_service.submit_review(
                session, {"ratings": full_scores(5)}, ADDRESS, now=sample_now
            )

    def test_unknown_staff(self, session, sample_now):
        with pytest.raises(NotFoundError):
            submit(session, 9999, sample_now)

    def test_invalid_score_writes_nothing(self, session, two_staff, sample_now):
        payload = {"staff_id": two_staff[0]["id"], "ratings": full_scores(5, speed=6)}
        with pytest.raises(ValidationError):
            review_service.submit_review(session, payload, ADDRESS, now=sample_now)
        assert review_count(session) == 0

    def test_comment_length_limits(self, session, two_staff, sample_now):
        with pytest.raises(ValidationError):
            submit(session, two_staff[0]["id"], sample_now, comment="x" * 501)
        with pytest.raises(ValidationError):
            submit(
                session,
                two_staff[0]["id"],
                sample_now,
                category_comments={"speed": "y" * 301},
            )
        assert review_count(session) == 0

    def test_optional_texts_are_stored(self, session, two_staff, sample_now):
        review = submit(
            session,
            two_staff[0]["id"],
            sample_now,
            comment="  Excelente servicio  ",
            customer_name="Carla",
            category_comments={"speed": "Muy rápida"},
        )
        assert review["comment"] == "Excelente servicio"
        assert review["customer_name"] == "Carla"
        assert review["category_comments"] == {"speed": "Muy rápida"}


class TestQueries:

    def _seed(self, session, staff_id, now, ratings):
        for offset, scores in enumerate(ratings):
            review_service.submit_review(
                session,
                {"staff_id": staff_id, "ratings": scores},
                f"10.0.0.{offset + 1}",
                now=now + timedelta(minutes=offset),
            )

    def test_staff_reviews_are_paginated_newest_first(self, session, two_staff, sample_now):
        staff_id = two_staff[0]["id"]
        self._seed(session, staff_id, sample_now, [full_scores(v) for v in (1, 2, 3, 4, 5)])

        page = review_service.list_staff_reviews(session, staff_id, page=1, limit=2)
        assert page["pagination"] == {"total": 5, "page": 1, "pages": 3}
        assert [r["rating"] for r in page["reviews"]] == [5.0, 4.0]
        assert all("ip_address" not in r for r in page["reviews"])

    def test_rating_filter_uses_rounded_bucket(self, session, two_staff, sample_now):
        staff_id = two_staff[0]["id"]
        self._seed(
            session,
            staff_id,
            sample_now,
            [
                full_scores(5, presentation=4),  # 4.8 -> 5
                full_scores(4, presentation=5),  # 4.2 -> 4
                full_scores(3),  # 3.0 -> 3
            ],
        )
        result = review_service.list_reviews(session, rating=5)
        assert [r["rating"] for r in result["reviews"]] == [4.8]
        result = review_service.list_reviews(session, rating=4)
        assert [r["rating"] for r in result["reviews"]] == [4.2]

    def test_moderation_listing_joins_staff_and_exposes_address(
        self, session, two_staff, sample_now
    ):
        submit(session, two_staff[1]["id"], sample_now)
        result = review_service.list_reviews(session, staff_id=two_staff[1]["id"])
        (review,) = result["reviews"]
        assert review["staff"]["name"] == "Luis"
        assert review["staff"]["employee_code"].startswith("EMP-")
        assert review["ip_address"] == ADDRESS

    def test_delete_review(self, session, two_staff, sample_now):
        review = submit(session, two_staff[0]["id"], sample_now)
        review_service.delete_review(session, review["id"])
        assert review_count(session) == 0
        with pytest.raises(NotFoundError):
            review_service.delete_review(session, review["id"])

    def test_overall_stats(self, session, two_staff, sample_now):
        self._seed(session, two_staff[0]["id"], sample_now, [full_scores(4), full_scores(5)])
        stats = review_service.get_overall_stats(session)
        assert stats["total_reviews"] == 2
        assert stats["total_waitresses"] == 2
        assert stats["average_rating"] == 4.5
        assert stats["rating_distribution"] == {1: 0, 2: 0, 3: 0, 4: 1, 5: 1}
        assert len(stats["recent_reviews"]) == 2

    def test_overall_stats_when_empty(self, session):
        stats = review_service.get_overall_stats(session)
        assert stats["total_reviews"] == 0
        assert stats["average_rating"] == 0
        assert stats["recent_reviews"] == []
