from backend.app.db.schemas import NativeRatings, ProductData, RatingInfo
from backend.app.services import rating_merge


def product(has_data=True, total_count=13, ratings=None):
    return ProductData(
        slug="example-plugin",
        total_count=total_count,
        rating_info=RatingInfo(average_rating=92.0, ratings=ratings or {5: 10, 4: 2, 1: 1}),
        has_data=has_data,
    )


def test_review_count_adds_remote_total():
    assert rating_merge.merge_review_count(4, product()) == 17


def test_review_count_unchanged_without_data():
    assert rating_merge.merge_review_count(4, None) == 4
    assert rating_merge.merge_review_count(4, product(has_data=False)) == 4


def test_average_blends_native_and_remote_stars():
    # remote: 5*10 + 4*2 + 1*1 = 59 over 13, native: 9 over 2
    average = rating_merge.blend_average_rating("4.50", NativeRatings(sum=9, count=2), product())

    assert average == "4.53"


def test_average_from_remote_only():
    average = rating_merge.blend_average_rating("0", NativeRatings(), product())

    assert average == f"{59 / 13:.2f}"


def test_average_unchanged_without_remote_ratings():
    native = NativeRatings(sum=9, count=2)

    assert rating_merge.blend_average_rating("4.50", native, None) == "4.50"
    assert rating_merge.blend_average_rating("4.50", native, product(has_data=False)) == "4.50"


def test_rating_counts_are_merged_per_star():
    merged = rating_merge.merge_rating_counts({5: 1, 3: 2}, product())

    assert merged == {5: 11, 4: 2, 3: 2, 1: 1}


def test_rating_counts_input_not_mutated():
    counts = {5: 1}
    rating_merge.merge_rating_counts(counts, product())

    assert counts == {5: 1}


def test_adjusted_native_count_never_negative():
    assert rating_merge.adjusted_native_count(20, product()) == 7
    assert rating_merge.adjusted_native_count(5, product()) == 0
    assert rating_merge.adjusted_native_count(5, None) == 5


def test_reviews_tab_title():
    assert rating_merge.reviews_tab_title(product(total_count=128)) == "WordPress.org Reviews (128)"
