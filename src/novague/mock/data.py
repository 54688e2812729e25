"""Deterministic data architecture from the analysis and UX artifacts."""

from __future__ import annotations

from dataclasses import dataclass, field

from novague.mock.rules import KeywordRule, all_matches
from novague.models.analysis import ProjectAnalysis
from novague.models.data import (
    APIEndpoint,
    DatabaseTable,
    DataArchitecture,
    DataFlow,
    EndpointResponse,
    ForeignKey,
    TableField,
    TableIndex,
    TableRelationship,
)
from novague.models.ux import ScreenAnalysis


@dataclass(frozen=True)
class EndpointSpec:
    """Endpoint template; ``screens`` are screen-id substrings of its consumers.

    An empty ``screens`` tuple means every non-public screen.
    """

    method: str
    path: str
    description: str
    authentication: bool
    screens: tuple[str, ...] = ()
    authorization: tuple[str, ...] = ()
    business_logic: tuple[str, ...] = ()


@dataclass(frozen=True)
class DataFragment:
    """Table plus the endpoints, policies and flow that come with it."""

    table: DatabaseTable
    endpoints: tuple[EndpointSpec, ...]
    policies: tuple[str, ...] = ()
    flow: DataFlow | None = None
    indexes: tuple[TableIndex, ...] = field(default_factory=tuple)


def _col(
    name: str,
    col_type: str,
    *constraints: str,
    default: str | None = None,
    description: str = "",
) -> TableField:
    return TableField(
        name=name,
        type=col_type,
        constraints=list(constraints),
        default_value=default,
        description=description,
    )


def _owned_table(name: str, description: str, *columns: TableField) -> DatabaseTable:
    """Table with an id primary key and a ``user_id`` reference to users."""
    return DatabaseTable(
        name=name,
        description=description,
        fields=[
            _col("id", "uuid", "PRIMARY KEY", default="gen_random_uuid()"),
            _col("user_id", "uuid", "NOT NULL", "FK: users.id", description="Owner"),
            *columns,
            _col("created_at", "timestamptz", "NOT NULL", default="now()"),
        ],
        primary_key="id",
        foreign_keys=[ForeignKey(column="user_id", references="users.id")],
    )


USERS = DataFragment(
    table=DatabaseTable(
        name="users",
        description="Registered user accounts",
        fields=[
            _col("id", "uuid", "PRIMARY KEY", default="gen_random_uuid()"),
            _col("email", "text", "UNIQUE", "NOT NULL"),
            _col("username", "text", "UNIQUE"),
            _col("avatar_url", "text"),
            _col("created_at", "timestamptz", "NOT NULL", default="now()"),
        ],
        primary_key="id",
    ),
    endpoints=(
        EndpointSpec(
            "GET",
            "/auth/me",
            "Return the signed-in user's profile",
            authentication=True,
            business_logic=("Resolve the session token to a user row",),
        ),
        EndpointSpec(
            "POST",
            "/auth/login",
            "Start a session with email and password",
            authentication=False,
            screens=("login", "signup"),
            business_logic=("Verify credentials", "Issue a session token"),
        ),
    ),
    policies=("Users can read and update only their own profile row.",),
    indexes=(TableIndex(table="users", columns=["email"], unique=True),),
)

POSTS = DataFragment(
    table=_owned_table(
        "posts",
        "User generated posts",
        _col("content", "text", "NOT NULL"),
        _col("media_url", "text"),
    ),
    endpoints=(
        EndpointSpec("GET", "/posts", "List posts for the feed", True, ("feed",)),
        EndpointSpec(
            "POST",
            "/posts",
            "Create a post",
            True,
            ("create-post",),
            business_logic=("Attach the signed-in user as author",),
        ),
        EndpointSpec("GET", "/posts/:id", "Fetch a single post", True, ("post-detail",)),
        EndpointSpec(
            "DELETE",
            "/posts/:id",
            "Delete a post",
            True,
            ("post-detail",),
            authorization=("owner", "admin"),
        ),
    ),
    policies=(
        "Signed-in users can read all posts.",
        "Only the author can update or delete a post.",
    ),
    flow=DataFlow(
        id="df-posts",
        name="Post Publishing",
        source="create-post",
        destination="posts",
        data_type="Post",
        transformations=["Resize media", "Sanitize content"],
    ),
    indexes=(TableIndex(table="posts", columns=["user_id", "created_at"]),),
)

PRODUCTS = DataFragment(
    table=DatabaseTable(
        name="products",
        description="Catalog items for sale",
        fields=[
            _col("id", "uuid", "PRIMARY KEY", default="gen_random_uuid()"),
            _col("name", "text", "NOT NULL"),
            _col("price", "decimal", "NOT NULL", "CHECK (price >= 0)"),
            _col("stock", "integer", "NOT NULL", default="0"),
            _col("created_at", "timestamptz", "NOT NULL", default="now()"),
        ],
        primary_key="id",
    ),
    endpoints=(
        EndpointSpec("GET", "/products", "List products", False, ("product-list",)),
        EndpointSpec(
            "GET", "/products/:id", "Fetch a single product", False, ("product-detail",)
        ),
    ),
    policies=("Products are publicly readable; only admins can modify them.",),
    flow=DataFlow(
        id="df-products",
        name="Catalog Browsing",
        source="products",
        destination="product-list",
        data_type="Product",
        transformations=["Paginate", "Format price"],
    ),
)

ORDERS = DataFragment(
    table=_owned_table(
        "orders",
        "Placed orders",
        _col("total", "decimal", "NOT NULL"),
        _col("status", "text", "NOT NULL", default="'pending'"),
    ),
    endpoints=(
        EndpointSpec("GET", "/orders", "List the user's orders", True, ("checkout",)),
        EndpointSpec(
            "POST",
            "/orders",
            "Place an order from the cart",
            True,
            ("checkout", "cart"),
            business_logic=("Check stock for every item", "Calculate the total"),
        ),
    ),
    policies=("Users can read only their own orders.",),
    flow=DataFlow(
        id="df-orders",
        name="Order Placement",
        source="checkout",
        destination="orders",
        data_type="Order",
        transformations=["Calculate totals", "Reserve stock"],
    ),
    indexes=(TableIndex(table="orders", columns=["user_id"]),),
)

# Every matching fragment contributes, in table order
FRAGMENT_RULES: tuple[KeywordRule, ...] = (
    KeywordRule(("post", "feed"), POSTS),
    KeywordRule(("shop", "product"), PRODUCTS),
    KeywordRule(("order", "checkout"), ORDERS),
)


def _build_endpoint(spec: EndpointSpec, table: str, ux: ScreenAnalysis) -> APIEndpoint:
    if spec.screens:
        used_by = [s.id for s in ux.screens if any(k in s.id for k in spec.screens)]
    else:
        used_by = [s.id for s in ux.screens if s.authentication != "public"]

    return APIEndpoint(
        method=spec.method,
        path=spec.path,
        description=spec.description,
        authentication=spec.authentication,
        authorization=list(spec.authorization),
        request={"params": ["id"]} if ":id" in spec.path else {},
        response=EndpointResponse(
            success={"table": table},
            errors=["401 Unauthorized"] if spec.authentication else [],
        ),
        business_logic=list(spec.business_logic),
        related_tables=[table],
        used_by_screens=used_by,
    )


def mock_data(analysis: ProjectAnalysis, ux: ScreenAnalysis) -> DataArchitecture:
    """Synthesize tables and endpoints from core features and screens.

    Args:
        analysis: Stage 1 artifact
        ux: Stage 2 artifact

    Returns:
        DataArchitecture with a users table, keyword-selected content tables
        and the session/login endpoints appended last
    """
    fragments: list[DataFragment] = all_matches(FRAGMENT_RULES, analysis.features_text())

    tables = [USERS.table.model_copy(deep=True)]
    endpoints: list[APIEndpoint] = []
    policies = list(USERS.policies)
    flows: list[DataFlow] = []
    indexes = [index.model_copy() for index in USERS.indexes]
    relationships: list[TableRelationship] = []

    for fragment in fragments:
        table = fragment.table.model_copy(deep=True)
        tables.append(table)
        endpoints.extend(_build_endpoint(spec, table.name, ux) for spec in fragment.endpoints)
        policies.extend(fragment.policies)
        indexes.extend(index.model_copy() for index in fragment.indexes)
        if fragment.flow is not None:
            flows.append(fragment.flow.model_copy(deep=True))
        relationships.extend(
            TableRelationship(from_table=fk.referenced_table, to_table=table.name)
            for fk in table.foreign_keys
        )

    endpoints.extend(_build_endpoint(spec, "users", ux) for spec in USERS.endpoints)

    return DataArchitecture(
        tables=tables,
        endpoints=endpoints,
        data_flows=flows,
        policies=policies,
        relationships=relationships,
        indexes=indexes,
    )
