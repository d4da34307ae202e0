"""
Row shaping for archiver results.

Callers at the query boundary describe the row they expect with a
ResultDescriptor; archiver_to_row checks that description against the
archiver row (nodeid integer, nodename text, nodehost text) and returns
the values in that order.

Invariants:
    - Columns are positional: id, name, host
    - Only composite (row) results can carry an archiver
    - No I/O happens here
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..errors import InvalidArgumentError, SchemaMismatchError
from .archiver_store import ArchiverNode


class ResultKind(Enum):
    """Kinds of result a caller can ask for."""

    SCALAR = "scalar"
    COMPOSITE = "composite"
    SET = "set"


@dataclass(frozen=True)
class ColumnDescriptor:
    """One column of an expected result row.

    Attributes:
        name: Column name as the caller will expose it
        py_type: Python type the caller expects in this column
    """

    name: str
    py_type: type


@dataclass(frozen=True)
class ResultDescriptor:
    """The result shape a caller expects back."""

    kind: ResultKind
    columns: tuple[ColumnDescriptor, ...] = ()

    @property
    def column_names(self) -> list[str]:
        return [column.name for column in self.columns]


ARCHIVER_ROW_TYPES: tuple[type, ...] = (int, str, str)

ARCHIVER_ROW_DESCRIPTOR = ResultDescriptor(
    kind=ResultKind.COMPOSITE,
    columns=(
        ColumnDescriptor("nodeid", int),
        ColumnDescriptor("nodename", str),
        ColumnDescriptor("nodehost", str),
    ),
)


def _type_names(types: tuple[type, ...] | list[type]) -> list[str]:
    return [getattr(t, "__name__", repr(t)) for t in types]


def archiver_to_row(
    archiver: ArchiverNode | None,
    descriptor: ResultDescriptor = ARCHIVER_ROW_DESCRIPTOR,
) -> tuple[int, str, str]:
    """Shape an archiver into the row the caller expects.

    Args:
        archiver: Archiver to shape
        descriptor: Result shape supplied by the caller

    Returns:
        (node_id, node_name, node_host)

    Raises:
        InvalidArgumentError: If archiver or descriptor is None
        SchemaMismatchError: If descriptor is not a row of (int, str, str)
    """
    if archiver is None:
        raise InvalidArgumentError("the given archiver must not be None", argument="archiver")

    if not isinstance(descriptor, ResultDescriptor):
        raise InvalidArgumentError(
            f"descriptor must be a ResultDescriptor, got {type(descriptor).__name__}",
            argument="descriptor",
        )

    if descriptor.kind is not ResultKind.COMPOSITE:
        raise SchemaMismatchError(
            f"return type must be a row type, got {descriptor.kind.value}",
            expected=_type_names(ARCHIVER_ROW_TYPES),
        )

    actual = tuple(column.py_type for column in descriptor.columns)
    if actual != ARCHIVER_ROW_TYPES:
        raise SchemaMismatchError(
            f"archiver row has {len(ARCHIVER_ROW_TYPES)} columns "
            f"({', '.join(_type_names(ARCHIVER_ROW_TYPES))}), "
            f"caller expects {len(actual)} ({', '.join(_type_names(actual))})",
            expected=_type_names(ARCHIVER_ROW_TYPES),
            actual=_type_names(actual),
        )

    return (archiver.node_id, archiver.node_name, archiver.node_host)
