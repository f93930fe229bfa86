from datetime import timedelta

import pytest
from django.utils import timezone

from accounts.models import Role, User
from common.exceptions import Forbidden
from listings.schemas import STORES, USERS
from listings.service import build_pagination, list_collection
from ratings.services import record_rating


@pytest.mark.parametrize("page, total_count, size", [
    (1, 0, 10), (1, 5, 10), (1, 10, 10), (2, 11, 10), (3, 25, 10), (5, 25, 10), (1, 1, 1),
])
def test_pagination_flags(page, total_count, size):
    total_pages = -(-total_count // size)
    pagination = build_pagination(page, size, total_count, total_pages)

    assert pagination["hasNext"] == (page < total_pages)
    assert pagination["hasPrev"] == (page > 1)
    if total_count == 0:
        assert pagination["totalPages"] == 0
        assert pagination["hasNext"] is False
        assert pagination["hasPrev"] is False


def test_listing_requires_admin(normal_user, owner_user):
    for identity in (normal_user, owner_user):
        with pytest.raises(Forbidden):
            list_collection(USERS, identity, {})


def test_user_listing_endpoint_is_admin_only(normal_user, client_for):
    response = client_for(normal_user).get("/admin/users/")
    assert response.status_code == 403
    assert response.json() == {"message": "Access denied. Insufficient permissions."}


def test_user_listing_envelope(admin_user, make_user, owner_user, make_store, client_for):
    make_store(owner=owner_user, name="Owner Managed Grocery Store")
    for _ in range(3):
        make_user()

    response = client_for(admin_user).get("/admin/users/", {"limit": 2, "sortBy": "email"})
    assert response.status_code == 200
    body = response.json()

    assert len(body["users"]) == 2
    assert body["pagination"] == {
        "currentPage": 1,
        "pageSize": 2,
        "totalPages": 3,
        "totalCount": 5,
        "hasNext": True,
        "hasPrev": False,
    }
    assert body["filters"]["sortBy"] == "email"
    assert body["filters"]["sortOrder"] == "asc"
    emails = [u["email"] for u in body["users"]]
    assert emails == sorted(emails)
    assert "password" not in body["users"][0]


def test_user_listing_includes_owned_store(admin_user, owner_user, make_store):
    make_store(owner=owner_user, name="Owner Managed Grocery Store")

    page = list_collection(USERS, admin_user, {"role": "store_owner"})
    assert [row["id"] for row in page.items] == [owner_user.pk]
    assert page.items[0]["store_name"] == "Owner Managed Grocery Store"
    assert page.applied_filters["role"] == "store_owner"


def test_user_search_is_case_insensitive(admin_user, make_user):
    target = make_user(name="Kimberly Evergreen Customer")
    make_user(name="Somebody Entirely Different")

    page = list_collection(USERS, admin_user, {"search": "EVERGREEN"})
    assert [row["id"] for row in page.items] == [target.pk]

    page = list_collection(USERS, admin_user, {"search": "evergreen", "searchBy": "email"})
    assert page.items == []


def test_date_filters(admin_user, make_user):
    make_user()
    today = timezone.localdate()
    yesterday = today - timedelta(days=1)

    page = list_collection(USERS, admin_user, {"dateFrom": today.isoformat(), "dateTo": today.isoformat()})
    assert page.pagination["totalCount"] == User.objects.count()

    page = list_collection(USERS, admin_user, {"dateTo": yesterday.isoformat()})
    assert page.pagination["totalCount"] == 0
    assert page.items == []


def test_out_of_range_page_is_empty(admin_user, make_user):
    make_user()
    page = list_collection(USERS, admin_user, {"page": "50"})

    assert page.items == []
    assert page.pagination["currentPage"] == 50
    assert page.pagination["totalCount"] == 2
    assert page.pagination["hasNext"] is False
    assert page.pagination["hasPrev"] is True


def test_rows_and_count_agree(admin_user, make_user):
    for _ in range(7):
        make_user(address="7 Shared Avenue")
    params = {"search": "shared", "searchBy": "address"}

    total = list_collection(USERS, admin_user, params).pagination["totalCount"]
    page = list_collection(USERS, admin_user, {**params, "page": "1", "limit": str(total)})

    assert total == 7
    assert len(page.items) == total


def test_empty_result(admin_user):
    page = list_collection(STORES, admin_user, {"search": "nothing matches this"})
    assert page.items == []
    assert page.pagination["totalPages"] == 0
    assert page.pagination["hasNext"] is False
    assert page.pagination["hasPrev"] is False


def test_store_listing_nests_owner(admin_user, owner_user, make_store, client_for):
    owned = make_store(owner=owner_user, name="Alpha Owned Corner Store")
    make_store(name="Beta Unowned Corner Store")

    response = client_for(admin_user).get("/admin/stores/")
    assert response.status_code == 200
    stores = response.json()["stores"]

    assert [s["name"] for s in stores] == ["Alpha Owned Corner Store", "Beta Unowned Corner Store"]
    assert stores[0]["owner"] == {"id": owner_user.pk, "name": owner_user.name, "email": owner_user.email}
    assert stores[0]["id"] == owned.pk
    assert stores[1]["owner"] == {"id": None, "name": None, "email": None}


def test_min_rating_scenario(admin_user, make_user, make_store, client_for):
    store = make_store(name="Scenario Store For Ratings")
    other = make_store(name="Always Excellent Store Here")
    record_rating(make_user().pk, store.pk, 4)
    record_rating(make_user().pk, store.pk, 2)
    record_rating(make_user().pk, other.pk, 5)

    client = client_for(admin_user)
    names = [s["name"] for s in client.get("/admin/stores/", {"minRating": "3"}).json()["stores"]]
    assert names == ["Always Excellent Store Here", "Scenario Store For Ratings"]

    record_rating(make_user().pk, store.pk, 1)

    body = client.get("/admin/stores/", {"minRating": "3"}).json()
    assert [s["name"] for s in body["stores"]] == ["Always Excellent Store Here"]
    assert body["filters"]["minRating"] == "3"

    body = client.get("/admin/stores/", {"maxRating": "2.5", "sortBy": "total_ratings"}).json()
    assert [s["name"] for s in body["stores"]] == ["Scenario Store For Ratings"]
    assert body["stores"][0]["total_ratings"] == 3
    assert float(body["stores"][0]["average_rating"]) == pytest.approx(2.33)


def test_store_listing_sort_desc(admin_user, make_user, make_store):
    low = make_store()
    high = make_store()
    record_rating(make_user().pk, low.pk, 1)
    record_rating(make_user().pk, high.pk, 5)

    page = list_collection(STORES, admin_user, {"sortBy": "average_rating", "sortOrder": "desc"})
    assert [row["id"] for row in page.items] == [high.pk, low.pk]


def test_invalid_sort_is_ignored(admin_user, make_user):
    make_user(name="Zed Zebra Customer Account")
    make_user(name="Aaron Aardvark Customer Acct")

    page = list_collection(USERS, admin_user, {"sortBy": "password; --", "sortOrder": "sideways"})
    names = [row["name"] for row in page.items]
    assert names == sorted(names)
    assert page.applied_filters["sortBy"] == "name"


def test_role_filter_via_http(admin_user, make_user, client_for):
    make_user(role=Role.STORE_OWNER)
    make_user(role=Role.NORMAL_USER)

    body = client_for(admin_user).get("/admin/users/", {"role": "NORMAL_USER"}).json()
    assert {u["role"] for u in body["users"]} == {"NORMAL_USER"}
    assert body["pagination"]["totalCount"] == 1


def test_underscore_search_is_not_a_wildcard(admin_user, make_user):
    target = make_user(name="Snake_Case Customer Account")
    make_user(name="Ordinary Spaced Customer Acct")

    page = list_collection(USERS, admin_user, {"search": "_"})
    assert [row["id"] for row in page.items] == [target.pk]

    page = list_collection(USERS, admin_user, {"search": "%"})
    assert page.items == []


def test_single_page_holds_every_row(admin_user):
    User.objects.bulk_create([
        User(
            name=f"Bulk Imported Customer {n:04d}",
            email=f"bulk{n}@example.com",
            address="1 Warehouse Row",
            role=Role.NORMAL_USER,
        )
        for n in range(120)
    ])

    total = list_collection(USERS, admin_user, {}).pagination["totalCount"]
    page = list_collection(USERS, admin_user, {"page": "1", "limit": str(total)})

    assert total == 121
    assert len(page.items) == total
    assert page.pagination["pageSize"] == total
    assert page.pagination["hasNext"] is False
