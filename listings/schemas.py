from accounts.models import Role
from .compiler import FilterDefinition, ListingSchema, as_day_end, as_day_start, as_float


def as_role(raw):
    return Role.parse(raw).value


USERS = ListingSchema(
    name="users",
    select_sql=(
        "SELECT u.id, u.name, u.email, u.address, u.role, u.created_at,"
        " CASE WHEN u.role = 'STORE_OWNER' THEN s.average_rating ELSE NULL END AS store_rating,"
        " CASE WHEN u.role = 'STORE_OWNER' THEN s.name ELSE NULL END AS store_name"
        " FROM users u"
        " LEFT JOIN stores s ON s.owner_id = u.id"
    ),
    count_sql="SELECT COUNT(*) FROM users u",
    primary_key="u.id",
    sortable_fields={
        "name": "u.name",
        "email": "u.email",
        "address": "u.address",
        "role": "u.role",
        "created_at": "u.created_at",
    },
    searchable_fields={
        "name": "u.name",
        "email": "u.email",
        "address": "u.address",
    },
    default_sort="name",
    default_search="name",
    filters=(
        FilterDefinition("role", "u.role", "=", as_role),
        FilterDefinition("dateFrom", "u.created_at", ">=", as_day_start),
        FilterDefinition("dateTo", "u.created_at", "<=", as_day_end),
    ),
)


STORES = ListingSchema(
    name="stores",
    select_sql=(
        "SELECT s.id, s.name, s.email, s.address, s.average_rating, s.total_ratings, s.created_at,"
        " o.id AS owner_id, o.name AS owner_name, o.email AS owner_email"
        " FROM stores s"
        " LEFT JOIN users o ON s.owner_id = o.id"
    ),
    count_sql="SELECT COUNT(*) FROM stores s",
    primary_key="s.id",
    sortable_fields={
        "name": "s.name",
        "email": "s.email",
        "address": "s.address",
        "average_rating": "s.average_rating",
        "total_ratings": "s.total_ratings",
        "created_at": "s.created_at",
    },
    searchable_fields={
        "name": "s.name",
        "email": "s.email",
        "address": "s.address",
    },
    default_sort="name",
    default_search="name",
    filters=(
        FilterDefinition("minRating", "s.average_rating", ">=", as_float),
        FilterDefinition("maxRating", "s.average_rating", "<=", as_float),
        FilterDefinition("dateFrom", "s.created_at", ">=", as_day_start),
        FilterDefinition("dateTo", "s.created_at", "<=", as_day_end),
    ),
)
