# SPDX-FileCopyrightText: 2024 Pepijn de Vos
#
# SPDX-License-Identifier: MPL-2.0
"""Pydantic schemas for file field configuration and attached records.

Records arrive in one of two shapes:

- remote shape, as returned by the backing data API. These carry the
  capitalized ``Id`` attribute.
- widget-native shape, as consumed by the SDK's update/clear primitives.

Both are modelled explicitly and told apart by ``record_shape``, which is the
only place the presence of ``Id`` is tested.
"""

from collections.abc import Mapping
from typing import Annotated, Any, Callable, Optional, Sequence, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    TypeAdapter,
    ValidationError,
    field_validator,
)

from .errors import ConfigurationError

REMOTE_ID_FIELD = "Id"


class RemoteRecord(BaseModel):
    """Attached record in the shape the remote data API returns it.

    Example:
        ```json
        {"Id": 12, "name": "report.pdf", "fileSizeKb": 84, "fileType": "application/pdf"}
        ```
    """
    model_config = ConfigDict(extra="allow", frozen=True)

    Id: Union[int, str, None] = Field(description="Remote record identifier")


class WidgetRecord(BaseModel):
    """Attached record in the shape the SDK widget works with."""
    model_config = ConfigDict(extra="allow", frozen=True)

    id: Union[int, str, None] = Field(None, description="Widget-side identifier, if any")


def record_shape(value: Any) -> str:
    """Return the discriminator tag for a raw or parsed record."""
    if isinstance(value, RemoteRecord):
        return "remote"
    if isinstance(value, WidgetRecord):
        return "widget"
    if isinstance(value, Mapping):
        return "remote" if REMOTE_ID_FIELD in value else "widget"
    return "remote" if hasattr(value, REMOTE_ID_FIELD) else "widget"


Record = Annotated[
    Union[
        Annotated[RemoteRecord, Tag("remote")],
        Annotated[WidgetRecord, Tag("widget")],
    ],
    Discriminator(record_shape),
]

_snapshot_adapter = TypeAdapter(list[Record])


def parse_snapshot(records: Any) -> list:
    """Validate a record snapshot. Anything that is not a list is empty."""
    if not isinstance(records, (list, tuple)):
        return []
    return _snapshot_adapter.validate_python(list(records))


def record_fields(record: BaseModel) -> dict[str, Any]:
    """Plain dict of the fields a record was given."""
    declared = type(record).model_fields
    return {
        key: value
        for key, value in record.model_dump().items()
        if key not in declared or key in record.model_fields_set
    }


def snapshots_equal(left: Sequence[BaseModel], right: Sequence[BaseModel]) -> bool:
    """Compare two snapshots by value: same length, equal field sets in order."""
    if len(left) != len(right):
        return False
    return all(
        record_fields(a) == record_fields(b)
        for a, b in zip(left, right)
    )


def is_remote_shape(records: Sequence[BaseModel]) -> bool:
    """A snapshot is remote-shaped when its first record is."""
    return bool(records) and record_shape(records[0]) == "remote"


def to_widget_records(
    records: Sequence[BaseModel],
    convert: Callable[[list[dict]], Any],
) -> list[dict]:
    """Normalize a snapshot to widget-native dicts.

    Remote-shaped snapshots go through ``convert`` (the SDK's shape-conversion
    primitive). Widget-shaped snapshots are passed through unchanged, and
    ``convert`` is not called. Empty snapshots are returned as-is.
    """
    if not records:
        return []
    raw = [record_fields(r) for r in records]
    if not is_remote_shape(records):
        return raw

    converted = convert(raw)
    result = []
    for item in converted:
        if isinstance(item, BaseModel):
            result.append(record_fields(item))
        elif isinstance(item, Mapping):
            result.append(dict(item))
        else:
            raise TypeError(f"Shape conversion returned a non-record item: {item!r}")
    return result


class FieldConfig(BaseModel):
    """Configuration for one mounted file field.

    Accepts either the Python field names or the camelCase names the host page
    uses (``fieldName``, ``tableName``, ``fieldKey``, ``existingFiles``). Any
    other attributes are passed through to the SDK's mount call untouched.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="allow")

    target_field: str = Field(alias="fieldName", description="Name of the file field on the table")
    target_table: str = Field("", alias="tableName", description="Table the field belongs to")
    target_key: str = Field("", alias="fieldKey", description="Key the SDK uses to address the field")
    initial_records: list[Record] = Field(
        default_factory=list,
        alias="existingFiles",
        description="Records currently attached to the field"
    )
    description: Optional[str] = None

    @field_validator("initial_records", mode="before")
    @classmethod
    def _coerce_records(cls, value: Any) -> Any:
        if not isinstance(value, (list, tuple)):
            return []
        return list(value)

    @classmethod
    def parse(cls, value: Any) -> "FieldConfig":
        """Build a FieldConfig from a mapping, raising ConfigurationError."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, Mapping):
            raise ConfigurationError(f"Field configuration must be a mapping, got {type(value).__name__}")
        try:
            return cls.model_validate(dict(value))
        except ValidationError as e:
            raise ConfigurationError(f"Invalid field configuration: {e}") from e

    @property
    def identity(self) -> tuple[str, str, str]:
        """Attributes whose change requires unmount and remount."""
        return (self.target_field, self.target_key, self.target_table)

    @property
    def passthrough(self) -> dict[str, Any]:
        return dict(self.model_extra or {})

    def mount_payload(self, records: list[dict]) -> dict[str, Any]:
        """Config dict handed to the SDK's mount primitive."""
        payload = self.passthrough
        payload.update(
            target_field=self.target_field,
            target_table=self.target_table,
            target_key=self.target_key,
            existing_records=records,
        )
        if self.description is not None:
            payload["description"] = self.description
        return payload
