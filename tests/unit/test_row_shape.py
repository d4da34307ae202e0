"""
Unit tests for archiver row shaping.

Tests cover:
- Column order and values
- Rejection of a missing archiver
- Result descriptor mismatches
"""

import pytest

from failover_monitor.errors import InvalidArgumentError, SchemaMismatchError
from failover_monitor.metadata.archiver_store import ArchiverNode
from failover_monitor.metadata.row_shape import (
    ARCHIVER_ROW_DESCRIPTOR,
    ColumnDescriptor,
    ResultDescriptor,
    ResultKind,
    archiver_to_row,
)


class TestArchiverToRow:
    """Tests for archiver_to_row."""

    @pytest.fixture
    def archiver(self):
        return ArchiverNode(node_id=7, node_name="n", node_host="h")

    def test_shapes_in_column_order(self, archiver):
        """Row is (id, name, host)."""
        assert archiver_to_row(archiver, ARCHIVER_ROW_DESCRIPTOR) == (7, "n", "h")

    def test_default_descriptor(self, archiver):
        """Descriptor defaults to the archiver row."""
        assert archiver_to_row(archiver) == (7, "n", "h")

    def test_column_names_are_free(self, archiver):
        """Only positions and types must match, not names."""
        descriptor = ResultDescriptor(
            kind=ResultKind.COMPOSITE,
            columns=(
                ColumnDescriptor("id", int),
                ColumnDescriptor("name", str),
                ColumnDescriptor("host", str),
            ),
        )

        assert archiver_to_row(archiver, descriptor) == (7, "n", "h")

    def test_none_archiver_raises(self):
        """Shaping nothing is an invalid argument."""
        with pytest.raises(InvalidArgumentError, match="must not be None") as exc_info:
            archiver_to_row(None, ARCHIVER_ROW_DESCRIPTOR)

        assert exc_info.value.code == "INVALID_ARGUMENT"
        assert exc_info.value.argument == "archiver"

    def test_none_descriptor_raises(self, archiver):
        """The caller must say what shape it expects."""
        with pytest.raises(
            InvalidArgumentError, match="descriptor must be a ResultDescriptor, got NoneType"
        ) as exc_info:
            archiver_to_row(archiver, None)

        assert exc_info.value.argument == "descriptor"

    def test_non_descriptor_raises(self, archiver):
        with pytest.raises(InvalidArgumentError, match="got tuple"):
            archiver_to_row(archiver, (int, str, str))

    def test_set_result_raises(self, archiver):
        """Archiver is a single row, not a set."""
        descriptor = ResultDescriptor(
            kind=ResultKind.SET,
            columns=ARCHIVER_ROW_DESCRIPTOR.columns,
        )

        with pytest.raises(SchemaMismatchError, match="got set") as exc_info:
            archiver_to_row(archiver, descriptor)

        assert exc_info.value.expected == ["int", "str", "str"]

    def test_empty_composite_raises(self, archiver):
        """A row with no columns cannot hold an archiver."""
        descriptor = ResultDescriptor(kind=ResultKind.COMPOSITE)

        with pytest.raises(SchemaMismatchError, match="caller expects 0") as exc_info:
            archiver_to_row(archiver, descriptor)

        assert exc_info.value.actual == []

    def test_scalar_result_raises(self, archiver):
        """Archiver cannot be returned as a scalar."""
        descriptor = ResultDescriptor(kind=ResultKind.SCALAR, columns=(ColumnDescriptor("x", int),))

        with pytest.raises(SchemaMismatchError, match="return type must be a row type"):
            archiver_to_row(archiver, descriptor)

    def test_wrong_column_count_raises(self, archiver):
        """Two columns do not fit a three column row."""
        descriptor = ResultDescriptor(
            kind=ResultKind.COMPOSITE,
            columns=(ColumnDescriptor("nodeid", int), ColumnDescriptor("nodename", str)),
        )

        with pytest.raises(SchemaMismatchError, match="caller expects 2") as exc_info:
            archiver_to_row(archiver, descriptor)

        assert exc_info.value.code == "SCHEMA_MISMATCH"
        assert exc_info.value.expected == ["int", "str", "str"]
        assert exc_info.value.actual == ["int", "str"]

    def test_wrong_column_type_raises(self, archiver):
        """Id column must be an integer."""
        descriptor = ResultDescriptor(
            kind=ResultKind.COMPOSITE,
            columns=(
                ColumnDescriptor("nodeid", str),
                ColumnDescriptor("nodename", str),
                ColumnDescriptor("nodehost", str),
            ),
        )

        with pytest.raises(SchemaMismatchError) as exc_info:
            archiver_to_row(archiver, descriptor)

        assert exc_info.value.actual == ["str", "str", "str"]

    def test_descriptor_column_names(self):
        assert ARCHIVER_ROW_DESCRIPTOR.column_names == ["nodeid", "nodename", "nodehost"]
