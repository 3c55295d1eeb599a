"""
Review API tests
"""

from datetime import timedelta

from wedine.utils.order_lifecycle import utc_now


def add_review(test_db, shop_id, rating, helpful=0, minutes_ago=0, text="Tasty food and quick service"):
    test_db.execute_query(
        "INSERT INTO reviews(shop_id, user_name, user_email, rating, review_text, helpful_count, created_at) "
        "VALUES (?,?,?,?,?,?,?)",
        [shop_id, "Asha", "asha@example.edu", rating, text, helpful, utc_now() - timedelta(minutes=minutes_ago)],
    )


class TestCreateReview:
    """POST /reviews"""

    def test_create(self, client, catalog):
        response = client.post("/api/v1/reviews", json={
            "user_name": "Asha",
            "user_email": "asha@example.edu",
            "shop_id": catalog["canteen_id"],
            "rating": 4,
            "review_text": "Crispy dosa, good chutney",
        })

        assert response.status_code == 200
        assert response.json()["data"]["review_id"] > 0

    def test_rating_out_of_range(self, client, catalog):
        response = client.post("/api/v1/reviews", json={
            "user_name": "Asha", "user_email": "asha@example.edu",
            "shop_id": catalog["canteen_id"], "rating": 6, "review_text": "Crispy dosa, good chutney",
        })
        assert response.status_code == 400

    def test_text_too_short(self, client, catalog):
        response = client.post("/api/v1/reviews", json={
            "user_name": "Asha", "user_email": "asha@example.edu",
            "shop_id": catalog["canteen_id"], "rating": 5, "review_text": "Nice",
        })
        assert response.status_code == 400
        assert response.json()["details"]["length"] == 4

    def test_unknown_shop(self, client, catalog):
        response = client.post("/api/v1/reviews", json={
            "user_name": "Asha", "user_email": "asha@example.edu",
            "shop_id": 999, "rating": 5, "review_text": "Crispy dosa, good chutney",
        })
        assert response.status_code == 404


class TestListReviews:
    """GET /reviews"""

    def test_stats_and_sorting(self, client, catalog, test_db):
        shop = catalog["canteen_id"]
        add_review(test_db, shop, 5, helpful=1, minutes_ago=30)
        add_review(test_db, shop, 4, helpful=7, minutes_ago=20)
        add_review(test_db, shop, 4, helpful=0, minutes_ago=10)
        add_review(test_db, catalog["juice_id"], 1)

        data = client.get(f"/api/v1/reviews?shop_id={shop}&sort=helpful").json()["data"]

        assert [r["helpful_count"] for r in data["reviews"]] == [7, 1, 0]
        assert data["stats"]["total_reviews"] == 3
        assert data["stats"]["average_rating"] == 4.3
        assert data["stats"]["rating_distribution"] == {"5": 1, "4": 2, "3": 0, "2": 0, "1": 0}
        assert data["pagination"] == {"page": 1, "has_more": False, "total_pages": 1}

    def test_average_rounds_half_up(self, client, catalog, test_db):
        for rating in (5, 5, 4, 4, 4, 4, 4, 4):
            add_review(test_db, catalog["canteen_id"], rating)

        data = client.get(f"/api/v1/reviews?shop_id={catalog['canteen_id']}").json()["data"]

        # 34 / 8 = 4.25
        assert data["stats"]["average_rating"] == 4.3

    def test_rating_filter_keeps_overall_stats(self, client, catalog, test_db):
        shop = catalog["canteen_id"]
        add_review(test_db, shop, 5)
        add_review(test_db, shop, 3)

        data = client.get(f"/api/v1/reviews?shop_id={shop}&filter=5").json()["data"]

        assert [r["rating"] for r in data["reviews"]] == [5]
        assert data["stats"]["total_reviews"] == 1
        assert data["stats"]["average_rating"] == 4.0

    def test_pagination(self, client, catalog, test_db):
        for i in range(12):
            add_review(test_db, catalog["canteen_id"], 5, minutes_ago=i)

        first = client.get("/api/v1/reviews?page=1").json()["data"]
        second = client.get("/api/v1/reviews?page=2").json()["data"]

        assert len(first["reviews"]) == 10
        assert first["pagination"] == {"page": 1, "has_more": True, "total_pages": 2}
        assert len(second["reviews"]) == 2
        assert second["pagination"]["has_more"] is False

    def test_no_reviews(self, client, catalog):
        data = client.get(f"/api/v1/reviews?shop_id={catalog['juice_id']}").json()["data"]
        assert data["stats"]["average_rating"] == 0
        assert data["pagination"]["total_pages"] == 0


class TestHelpfulVotes:
    """POST /reviews/helpful"""

    def test_increment_and_floor_at_zero(self, client, catalog, test_db):
        add_review(test_db, catalog["canteen_id"], 5)
        review_id = test_db.execute_one("SELECT review_id FROM reviews")[0]

        up = client.post("/api/v1/reviews/helpful", json={"review_id": review_id, "action": "increment"})
        client.post("/api/v1/reviews/helpful", json={"review_id": review_id, "action": "decrement"})
        floor = client.post("/api/v1/reviews/helpful", json={"review_id": review_id, "action": "decrement"})

        assert up.json()["data"]["helpful_count"] == 1
        assert floor.json()["data"]["helpful_count"] == 0

    def test_invalid_action(self, client, catalog, test_db):
        add_review(test_db, catalog["canteen_id"], 5)
        review_id = test_db.execute_one("SELECT review_id FROM reviews")[0]

        response = client.post("/api/v1/reviews/helpful", json={"review_id": review_id, "action": "double"})

        assert response.status_code == 400

    def test_unknown_review(self, client):
        response = client.post("/api/v1/reviews/helpful", json={"review_id": 999})
        assert response.status_code == 404
