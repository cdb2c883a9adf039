import pytest

from rehab_server.exception import ForbiddenError, NotFoundError
from rehab_server.services.review_service import ReviewService


@pytest.fixture
def listing_id(repos):
    repos.listing.insert({'listing_id': 'LST-1', 'title': 'Walker', 'keywords': ['walker'], 'price': 10})
    return 'LST-1'


@pytest.fixture
def reviews(repos, clock):
    return ReviewService(review_repo=repos.review, listing_repo=repos.listing, clock=clock)


def test_add_review(reviews, alice, listing_id, clock):
    review = reviews.add_review(alice, listing_id, 4, 'Sturdy and clean')
    assert review.rating == 4
    assert review.authorId == 'alice'
    assert review.authorName == 'Alice'
    assert review.createdAt == clock.now_ms


@pytest.mark.parametrize('rating', [0, 6, 3.5, 'five', None, True])
def test_rating_must_be_integer_one_to_five(reviews, alice, listing_id, rating):
    with pytest.raises(ValueError):
        reviews.add_review(alice, listing_id, rating, 'ok')


def test_string_rating_accepted(reviews, alice, listing_id):
    assert reviews.add_review(alice, listing_id, '5', 'great').rating == 5


def test_comment_required(reviews, alice, listing_id):
    with pytest.raises(ValueError):
        reviews.add_review(alice, listing_id, 3, '  ')


def test_review_requires_existing_listing(reviews, alice):
    with pytest.raises(NotFoundError):
        reviews.add_review(alice, 'LST-missing', 3, 'ok')


def test_pages_of_five_newest_first(reviews, alice, listing_id, clock):
    for i in range(7):
        clock.advance(10)
        reviews.add_review(alice, listing_id, (i % 5) + 1, f'review {i}')

    first = reviews.list_reviews(listing_id, 1)
    assert [r['comment'] for r in first['reviews']] == [f'review {i}' for i in (6, 5, 4, 3, 2)]
    assert first['total'] == 7
    assert first['has_more'] is True

    second = reviews.list_reviews(listing_id, 2)
    assert [r['comment'] for r in second['reviews']] == ['review 1', 'review 0']
    assert second['has_more'] is False
    assert second['average_rating'] == pytest.approx(round((1 + 2 + 3 + 4 + 5 + 1 + 2) / 7, 2))


def test_no_reviews(reviews, listing_id):
    page = reviews.list_reviews(listing_id)
    assert page == {'reviews': [], 'page': 1, 'total': 0, 'has_more': False, 'average_rating': None}


def test_author_only_update_and_delete(reviews, alice, bob, listing_id):
    review = reviews.add_review(alice, listing_id, 2, 'meh')
    with pytest.raises(ForbiddenError):
        reviews.update_review(bob, review.id, rating=5)
    with pytest.raises(ForbiddenError):
        reviews.delete_review(bob, review.id)

    updated = reviews.update_review(alice, review.id, rating=5, comment='better after repair')
    assert updated.rating == 5 and updated.comment == 'better after repair'
    assert reviews.delete_review(alice, review.id) is True
    assert reviews.list_reviews(listing_id)['total'] == 0


def test_average_rating_only_counts_the_listing(repos):
    for i, rating in enumerate([5, 4, 4]):
        repos.review.insert({'review_id': f'REV-{i}', 'listing_id': 'LST-9', 'rating': rating})
    repos.review.insert({'review_id': 'REV-x', 'listing_id': 'LST-other', 'rating': 1})

    assert repos.review.average_rating('LST-9') == pytest.approx(4.33)
    assert repos.review.average_rating('LST-other') == 1
    assert repos.review.average_rating('LST-none') is None
