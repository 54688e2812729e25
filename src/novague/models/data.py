"""Data architecture artifact (stage 3): tables, endpoints, data flows, policies."""

from __future__ import annotations

import re
from typing import Any, Literal

from pydantic import Field, model_validator

from novague.models.base import ArtifactModel

HttpMethod = Literal["GET", "POST", "PUT", "DELETE", "PATCH"]

_NON_SLUG = re.compile(r"[^a-z0-9]+")


def endpoint_id(method: str, path: str) -> str:
    """Derive a stable endpoint id from its method and path.

    Example:
        >>> endpoint_id("GET", "/posts/:id")
        'get-posts-id'
    """
    slug = _NON_SLUG.sub("-", f"{method} {path}".lower()).strip("-")
    return slug


class TableField(ArtifactModel):
    """A column of a database table."""

    name: str = Field(..., description="Column name")
    type: str = Field(..., description="Column type")
    constraints: list[str] = Field(default_factory=list, description="Column constraints")
    default_value: str | None = Field(default=None)
    description: str = Field(default="")


class ForeignKey(ArtifactModel):
    """A foreign key from a local column to ``table.column``."""

    column: str = Field(..., description="Local column")
    references: str = Field(..., description="Referenced table.column")

    @property
    def referenced_table(self) -> str:
        """Name of the referenced table."""
        return self.references.split(".", 1)[0]


class DatabaseTable(ArtifactModel):
    """A relational table."""

    name: str = Field(..., min_length=1, description="Table name")
    description: str = Field(default="")
    fields: list[TableField] = Field(default_factory=list)
    primary_key: str = Field(default="id")
    foreign_keys: list[ForeignKey] = Field(default_factory=list)

    def field_names(self) -> list[str]:
        """Names of all columns."""
        return [f.name for f in self.fields]


class TableRelationship(ArtifactModel):
    """A relationship between two tables."""

    from_table: str
    to_table: str
    type: Literal["one-to-one", "one-to-many", "many-to-many"] = "one-to-many"


class TableIndex(ArtifactModel):
    """An index on one or more columns."""

    table: str
    columns: list[str] = Field(default_factory=list)
    unique: bool = False


class EndpointResponse(ArtifactModel):
    """Success payload shape and error responses of an endpoint."""

    success: dict[str, Any] = Field(default_factory=dict)
    errors: list[str] = Field(default_factory=list)


class APIEndpoint(ArtifactModel):
    """An HTTP endpoint.

    ``id`` is derived from method and path when not supplied.

    Attributes:
        id: Stable endpoint identifier
        method: HTTP method
        path: Route path, parameters written as ``:name``
        authentication: Whether a signed-in user is required
        authorization: Roles or rules checked beyond authentication
        related_tables: Tables the endpoint reads or writes
        used_by_screens: Ids of screens that call the endpoint
    """

    id: str = Field(default="", description="Endpoint identifier")
    method: HttpMethod = Field(..., description="HTTP method")
    path: str = Field(..., min_length=1, description="Route path")
    description: str = Field(default="")
    authentication: bool = Field(default=False)
    authorization: list[str] = Field(default_factory=list)
    request: dict[str, Any] = Field(default_factory=dict)
    response: EndpointResponse = Field(default_factory=EndpointResponse)
    business_logic: list[str] = Field(default_factory=list)
    related_tables: list[str] = Field(default_factory=list)
    used_by_screens: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def fill_id(self) -> APIEndpoint:
        """Derive the id from method and path when missing."""
        if not self.id:
            self.id = endpoint_id(self.method, self.path)
        return self

    @property
    def signature(self) -> str:
        """``METHOD /path`` form used in component dependencies."""
        return f"{self.method} {self.path}"


class DataFlow(ArtifactModel):
    """Movement of data between parts of the system."""

    id: str = Field(..., description="Flow identifier")
    name: str = Field(..., description="Flow name")
    source: str = Field(..., description="Data source")
    destination: str = Field(..., description="Data destination")
    data_type: str = Field(default="")
    transformations: list[str] = Field(default_factory=list)


class DataArchitecture(ArtifactModel):
    """Stage 3 artifact.

    Attributes:
        tables: Relational tables
        endpoints: HTTP endpoints
        data_flows: Data movement descriptions
        policies: Row-level security policy statements
        relationships: Table relationships
        indexes: Table indexes
    """

    tables: list[DatabaseTable] = Field(..., min_length=1)
    endpoints: list[APIEndpoint] = Field(default_factory=list)
    data_flows: list[DataFlow] = Field(default_factory=list)
    policies: list[str] = Field(default_factory=list)
    relationships: list[TableRelationship] = Field(default_factory=list)
    indexes: list[TableIndex] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_unique_names(self) -> DataArchitecture:
        """Reject duplicate table names and make endpoint ids unique.

        Raises:
            ValueError: If two tables share a name
        """
        seen: set[str] = set()
        for table in self.tables:
            if table.name in seen:
                raise ValueError(f"Duplicate table name: {table.name}")
            seen.add(table.name)

        # Paths such as /posts/:id and /posts/{id} slug to the same id;
        # later endpoints get a numeric suffix, the first keeps its id
        taken: set[str] = set()
        for endpoint in self.endpoints:
            candidate = endpoint.id
            suffix = 2
            while candidate in taken:
                candidate = f"{endpoint.id}-{suffix}"
                suffix += 1
            endpoint.id = candidate
            taken.add(candidate)
        return self

    def get_table(self, name: str) -> DatabaseTable | None:
        """Return the table with the given name, if any."""
        return next((t for t in self.tables if t.name == name), None)

    def get_endpoint(self, endpoint_id: str) -> APIEndpoint | None:
        """Return the endpoint with the given id, if any."""
        return next((e for e in self.endpoints if e.id == endpoint_id), None)
