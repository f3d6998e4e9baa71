"""Credentialing dashboard view-model: a pure derivation over fetched rows.

Given the three row collections loaded for one request and the user's view
parameters, `derive_dashboard` rebuilds every piece of dashboard state from
scratch:

1. filter vocabularies (priorities, statuses)
2. per-dataset filter + sort
3. grouping by owning entity
4. view selection
5. group-level text filter
6. selection resolution
7. detail filter on the selected group

No I/O happens here. Each collection is capped upstream at 100 rows, so
full recomputation on every call is fine.
"""

import enum
import unicodedata
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from typing import ClassVar, Union

ALL = "all"


class Dataset(str, enum.Enum):
    provider_facility = "provider_facility"
    facility_prelive = "facility_prelive"
    provider_license = "provider_license"


class ViewKey(str, enum.Enum):
    provider_facility = "provider_facility"
    facility_provider = "facility_provider"
    facility_prelive = "facility_prelive"
    provider_license = "provider_license"


class SortKey(str, enum.Enum):
    updated_desc = "updated_desc"
    updated_asc = "updated_asc"
    name_asc = "name_asc"
    name_desc = "name_desc"


class GroupKeyError(ValueError):
    """A row carries neither an identity nor a display name for its group."""


# ---------------------------------------------------------------------------
# Row variants. Each carries its own field-accessor table as class attributes.
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProviderFacilityRow:
    dataset: ClassVar[Dataset] = Dataset.provider_facility
    name_field: ClassVar[str] = "provider_name"
    status_field: ClassVar[str | None] = "decision"
    search_fields: ClassVar[tuple[str, ...]] = (
        "provider_name",
        "facility_name",
        "facility_state",
        "priority",
        "privileges",
        "decision",
        "facility_type",
    )

    id: str
    provider_id: str | None = None
    provider_name: str = ""
    provider_degree: str | None = None
    facility_id: str | None = None
    facility_name: str = ""
    facility_state: str | None = None
    priority: str | None = None
    privileges: str | None = None
    decision: str | None = None
    facility_type: str | None = None
    application_required: bool | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class FacilityPreliveRow:
    dataset: ClassVar[Dataset] = Dataset.facility_prelive
    name_field: ClassVar[str] = "facility_name"
    status_field: ClassVar[str | None] = None
    search_fields: ClassVar[tuple[str, ...]] = (
        "facility_name",
        "facility_state",
        "priority",
        "roles_needed",
    )

    id: str
    facility_id: str | None = None
    facility_name: str = ""
    facility_state: str | None = None
    priority: str | None = None
    go_live_date: date | None = None
    credentialing_due_date: date | None = None
    board_meeting_date: date | None = None
    temps_possible: bool | None = None
    payor_enrollment_required: bool | None = None
    roles_needed: tuple[str, ...] = ()
    updated_at: datetime | None = None


@dataclass(frozen=True)
class ProviderLicenseRow:
    dataset: ClassVar[Dataset] = Dataset.provider_license
    name_field: ClassVar[str] = "provider_name"
    status_field: ClassVar[str | None] = "status"
    search_fields: ClassVar[tuple[str, ...]] = (
        "provider_name",
        "state",
        "priority",
        "path",
        "status",
        "initial_or_renewal",
    )

    id: str
    provider_id: str | None = None
    provider_name: str = ""
    provider_degree: str | None = None
    state: str | None = None
    priority: str | None = None
    status: str | None = None
    path: str | None = None
    initial_or_renewal: str | None = None
    starts_at: date | None = None
    expires_at: date | None = None
    updated_at: datetime | None = None


Row = Union[ProviderFacilityRow, FacilityPreliveRow, ProviderLicenseRow]


@dataclass(frozen=True)
class GroupBy:
    """Which fields identify, label and annotate a group of rows."""

    id_field: str
    label_field: str
    subtitle_field: str


BY_PROVIDER = GroupBy("provider_id", "provider_name", "provider_degree")
BY_FACILITY = GroupBy("facility_id", "facility_name", "facility_state")


@dataclass(frozen=True)
class GroupedRows:
    key: str
    label: str
    subtitle: str | None
    rows: tuple[Row, ...]


@dataclass(frozen=True)
class DashboardRows:
    provider_facility: tuple[ProviderFacilityRow, ...] = ()
    facility_prelive: tuple[FacilityPreliveRow, ...] = ()
    provider_license: tuple[ProviderLicenseRow, ...] = ()


@dataclass(frozen=True)
class DashboardParams:
    view: ViewKey = ViewKey.provider_facility
    group_search: str = ""
    detail_search: str = ""
    priority_filter: str = ALL
    status_filter: str = ALL
    sort: SortKey = SortKey.updated_desc
    selected_key: str | None = None

    def with_view(self, view: ViewKey) -> "DashboardParams":
        """Switching views clears the selection and both search boxes."""
        return replace(self, view=view, selected_key=None, group_search="", detail_search="")


@dataclass(frozen=True)
class DashboardState:
    priorities: list[str]
    statuses: list[str]
    groups: dict[ViewKey, list[GroupedRows]]
    active_groups: list[GroupedRows]
    selected_key: str | None
    selected_group: GroupedRows | None
    detail_rows: list[Row]
    selection_changed: bool = False
    filtered: dict[Dataset, list[Row]] = field(default_factory=dict)


# view -> (source dataset, grouping)
VIEW_GROUPINGS: dict[ViewKey, tuple[Dataset, GroupBy]] = {
    ViewKey.provider_facility: (Dataset.provider_facility, BY_PROVIDER),
    ViewKey.facility_provider: (Dataset.provider_facility, BY_FACILITY),
    ViewKey.facility_prelive: (Dataset.facility_prelive, BY_FACILITY),
    ViewKey.provider_license: (Dataset.provider_license, BY_PROVIDER),
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def normalize(value: str | None) -> str:
    return (value or "").strip().lower()


def collation_key(value: str | None) -> tuple[str, str, str]:
    """Locale-style sort key: accents and case ignored first, lowercase wins ties."""
    text = value or ""
    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), text.swapcase(), text


def _timestamp(value: datetime | None) -> float:
    if value is None:
        return 0.0
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


def _field_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return " ".join(str(v) for v in value)
    return str(value)


def search_text(row: Row) -> str:
    return " ".join(_field_text(getattr(row, name)) for name in row.search_fields).lower()


def _status_of(row: Row) -> str | None:
    if row.status_field is None:
        return None
    return getattr(row, row.status_field)


# ---------------------------------------------------------------------------
# Pipeline stages
# ---------------------------------------------------------------------------


def extract_vocabularies(rows: DashboardRows) -> tuple[list[str], list[str]]:
    """Distinct non-empty priorities and statuses, ordered for filter selectors."""
    priorities: set[str] = set()
    statuses: set[str] = set()
    for collection in (rows.provider_facility, rows.facility_prelive, rows.provider_license):
        for row in collection:
            if row.priority:
                priorities.add(row.priority)
            status = _status_of(row)
            if status:
                statuses.add(status)
    return sorted(priorities, key=collation_key), sorted(statuses, key=collation_key)


def filter_and_sort(
    rows: tuple[Row, ...] | list[Row],
    *,
    priority_filter: str = ALL,
    status_filter: str = ALL,
    sort: SortKey = SortKey.updated_desc,
) -> list[Row]:
    wanted_priority = normalize(priority_filter)
    wanted_status = normalize(status_filter)

    kept = []
    for row in rows:
        if priority_filter != ALL and normalize(row.priority) != wanted_priority:
            continue
        if (
            status_filter != ALL
            and row.status_field is not None
            and normalize(_status_of(row)) != wanted_status
        ):
            continue
        kept.append(row)

    if sort in (SortKey.name_asc, SortKey.name_desc):
        return sorted(
            kept,
            key=lambda r: collation_key(getattr(r, r.name_field)),
            reverse=sort == SortKey.name_desc,
        )
    return sorted(
        kept,
        key=lambda r: _timestamp(r.updated_at),
        reverse=sort == SortKey.updated_desc,
    )


def group_rows(rows: list[Row], by: GroupBy) -> list[GroupedRows]:
    """Group rows by owning entity in order of first appearance."""
    order: list[str] = []
    heads: dict[str, Row] = {}
    members: dict[str, list[Row]] = {}

    for row in rows:
        key = getattr(row, by.id_field) or getattr(row, by.label_field)
        if not key:
            raise GroupKeyError(
                f"{row.dataset.value} row {row.id!r} has no {by.id_field} or {by.label_field}"
            )
        if key not in members:
            order.append(key)
            heads[key] = row
            members[key] = []
        members[key].append(row)

    return [
        GroupedRows(
            key=key,
            label=getattr(heads[key], by.label_field),
            subtitle=getattr(heads[key], by.subtitle_field) or None,
            rows=tuple(members[key]),
        )
        for key in order
    ]


def filter_groups(groups: list[GroupedRows], query: str) -> list[GroupedRows]:
    q = normalize(query)
    if not q:
        return groups
    return [g for g in groups if q in f"{g.label} {g.subtitle or ''}".lower()]


def resolve_selection(groups: list[GroupedRows], selected_key: str | None) -> str | None:
    """Keep the current selection if it survived filtering, else fall back to the first group."""
    if not groups:
        return None
    if selected_key is not None and any(g.key == selected_key for g in groups):
        return selected_key
    return groups[0].key


def filter_detail_rows(rows: tuple[Row, ...] | list[Row], query: str) -> list[Row]:
    q = normalize(query)
    if not q:
        return list(rows)
    return [row for row in rows if q in search_text(row)]


def derive_dashboard(rows: DashboardRows, params: DashboardParams) -> DashboardState:
    """Rebuild the full dashboard state from raw rows and view parameters."""
    priorities, statuses = extract_vocabularies(rows)

    filtered: dict[Dataset, list[Row]] = {
        dataset: filter_and_sort(
            getattr(rows, dataset.value),
            priority_filter=params.priority_filter,
            status_filter=params.status_filter,
            sort=params.sort,
        )
        for dataset in Dataset
    }

    groups = {
        view: group_rows(filtered[dataset], by)
        for view, (dataset, by) in VIEW_GROUPINGS.items()
    }

    active_groups = filter_groups(groups[params.view], params.group_search)

    selected_key = resolve_selection(active_groups, params.selected_key)
    selected_group = next((g for g in active_groups if g.key == selected_key), None)
    detail_rows = (
        filter_detail_rows(selected_group.rows, params.detail_search) if selected_group else []
    )

    return DashboardState(
        priorities=priorities,
        statuses=statuses,
        groups=groups,
        active_groups=active_groups,
        selected_key=selected_key,
        selected_group=selected_group,
        detail_rows=detail_rows,
        selection_changed=selected_key != params.selected_key,
        filtered=filtered,
    )
