"""Request context and URL parameter parsing.

Usage:
    request = RequestContext.from_params(
        {
            "sort": "-title,id",
            "filter": {
                "status": "published",
                "tags": {"value": ["1", "2"], "operator": "IN"},
                "author.name": {"value": "ada", "operator": "STARTS_WITH"},
            },
            "page": "2",
            "range": "10",
            "fields": "id,title",
        },
        method=HttpMethod.GET,
        account=current_account,
    )

    # Read-as copy, e.g. to render a freshly created entity as a GET would
    request.read_as(HttpMethod.GET)
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from entityprovider.config import ProviderSettings
from entityprovider.core.errors import ClientError
from entityprovider.core.field import HttpMethod
from entityprovider.core.query import FilterClause, Operator, SortClause, SortDirection
from entityprovider.core.types import Account


class _RawParams(BaseModel):
    """Shape of the URL parameters before interpretation."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    filter: dict[str, Any] | None = None
    sort: str | None = None
    page: int = 1
    range: int | None = None
    limit_fields: str | list[str] | None = Field(default=None, alias="fields")
    load_by_field_name: str | None = Field(default=None, alias="loadByFieldName")


@dataclass(frozen=True)
class RequestContext:
    """Parsed request parameters, passed explicitly into every provider call."""

    method: HttpMethod = HttpMethod.GET
    account: Account = None
    filters: tuple[FilterClause, ...] = ()
    sorts: tuple[SortClause, ...] = ()
    page: int = 1
    range: int | None = None
    fields: tuple[str, ...] = ()
    """Allow-list of public fields to render. Empty renders every field."""
    load_by_field_name: str | None = None

    def read_as(self, method: HttpMethod) -> RequestContext:
        """Copy of this request with another method."""
        return replace(self, method=method)

    @classmethod
    def from_params(
        cls,
        params: Mapping[str, Any],
        *,
        method: HttpMethod = HttpMethod.GET,
        account: Account = None,
        settings: ProviderSettings | None = None,
    ) -> RequestContext:
        """Parse query-string style parameters.

        Args:
            params: Raw parameters (``filter``, ``sort``, ``page``, ``range``, ``fields``,
                ``loadByFieldName``).
            method: Request method.
            account: Account the request runs as.
            settings: Enabled parameters and allowed conjunctions.

        Returns:
            Parsed request context.

        Raises:
            ClientError: On malformed or disabled parameters.
        """
        settings = settings or ProviderSettings()
        try:
            raw = _RawParams.model_validate(dict(params))
        except ValidationError as e:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
            raise ClientError(f"Invalid request parameters: {fields}") from e

        _ensure_enabled(raw.filter, settings.enable_filter, "Filter")
        _ensure_enabled(raw.sort, settings.enable_sort, "Sort")
        _ensure_enabled(raw.limit_fields, settings.enable_fields, "Fields")
        _ensure_enabled(
            raw.load_by_field_name, settings.enable_load_by_field_name, "Load by field name"
        )

        return cls(
            method=method,
            account=account,
            filters=parse_filters(raw.filter or {}, settings.allowed_conjunctions),
            sorts=parse_sort(raw.sort or ""),
            page=raw.page,
            range=raw.range,
            fields=_parse_fields(raw.limit_fields),
            load_by_field_name=raw.load_by_field_name or None,
        )


def _ensure_enabled(value: Any, enabled: bool, label: str) -> None:
    if value and not enabled:
        raise ClientError(f"{label} parameters have been disabled in server configuration.")


def _parse_fields(value: str | list[str] | None) -> tuple[str, ...]:
    if not value:
        return ()
    names = value.split(",") if isinstance(value, str) else value
    return tuple(name.strip() for name in names if name.strip())


def parse_sort(value: str) -> tuple[SortClause, ...]:
    """Parse ``-title,id`` into (title DESC, id ASC).

    Raises:
        ClientError: If a sort item is empty.
    """
    if not value.strip():
        return ()
    clauses = []
    for item in value.split(","):
        item = item.strip()
        direction = SortDirection.ASC
        if item.startswith("-"):
            direction = SortDirection.DESC
            item = item[1:]
        elif item.startswith("+"):
            item = item[1:]
        if not item:
            raise ClientError(f'Invalid sort parameter "{value}".')
        clauses.append(SortClause(item, direction))
    return tuple(clauses)


def parse_filters(
    raw: Mapping[str, Any], allowed_conjunctions: list[str] | tuple[str, ...] = ("AND",)
) -> tuple[FilterClause, ...]:
    """Parse the ``filter`` parameter into clauses.

    Accepted forms per public field:
        ``"published"``                          equality
        ``["1", "2"]``                           IN
        ``{"value": ..., "operator": ...,
           "conjunction": "AND", "target": ...}`` explicit

    A single operator is repeated for every value.

    Raises:
        ClientError: On unknown or missing operators, unknown conjunctions, or empty values.
    """
    allowed = [c.upper() for c in allowed_conjunctions]
    clauses = []
    for public_field, spec in raw.items():
        if isinstance(spec, Mapping):
            value = spec.get("value")
            operator = spec.get("operator", "=")
            conjunction = str(spec.get("conjunction", "AND"))
            target = spec.get("target") or None
        elif isinstance(spec, list | tuple):
            value, operator, conjunction, target = list(spec), "IN", "AND", None
        else:
            value, operator, conjunction, target = spec, "=", "AND", None

        if value is None or value == [] or value == "":
            raise ClientError(f'Value not present for the "{public_field}" filter.')
        values = tuple(str(v) for v in value) if isinstance(value, list | tuple) else (str(value),)

        raw_operators = operator if isinstance(operator, list | tuple) else [operator] * len(values)
        operators = tuple(_parse_operator(str(op)) for op in raw_operators)
        if not operators:
            raise ClientError(f'Operator not present for the "{public_field}" filter.')

        if conjunction.upper() not in allowed:
            raise ClientError(
                f'Conjunction "{conjunction}" is not allowed for filtering on this resource. '
                f"Allowed conjunctions are: {', '.join(allowed)}"
            )
        clauses.append(
            FilterClause(
                public_field=public_field,
                operators=operators,
                values=values,
                conjunction=conjunction.upper(),
                target=str(target) if target else None,
            )
        )
    return tuple(clauses)


def _parse_operator(raw: str) -> Operator:
    try:
        return Operator.parse(raw)
    except ValueError:
        allowed = ", ".join(op.value for op in Operator)
        raise ClientError(
            f'Operator "{raw}" is not allowed for filtering on this resource. '
            f"Allowed operators are: {allowed}"
        ) from None
