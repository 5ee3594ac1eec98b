"""Tests for composite constraint assembly."""

import pytest

from catalog_graph.assembler import ConstraintAssembler, ForeignKeyAssembler
from catalog_graph.errors import InconsistentError
from catalog_graph.models import ForeignKey, Index, PrimaryKey


class TestConstraintAssembler:
    """Tests for ConstraintAssembler."""

    def test_folds_rows_in_arrival_order(self):
        assembler = ConstraintAssembler("primary key")

        pk, created = assembler.add("sales.order_lines", "pk", "order_id", lambda: PrimaryKey(name="pk"))
        same, created_again = assembler.add("sales.order_lines", "pk", "line_no", lambda: PrimaryKey(name="pk"))

        assert created is True
        assert created_again is False
        assert pk is same
        assert pk.columns == ["order_id", "line_no"]
        assert len(assembler) == 1

    def test_same_name_different_owner(self):
        assembler = ConstraintAssembler("index")

        a, _ = assembler.add("public.a", "idx", "id", lambda: Index(name="idx"))
        b, _ = assembler.add("public.b", "idx", "id", lambda: Index(name="idx"))

        assert a is not b
        assert [owner for owner, _ in assembler.entities()] == ["public.a", "public.b"]

    @pytest.mark.parametrize("blank", [None, "", "  "])
    def test_blank_name_is_its_own_entity(self, blank):
        assembler = ConstraintAssembler("index")

        assembler.add("public.orders", blank, "a", lambda: Index(name=blank))
        assembler.add("public.orders", blank, "b", lambda: Index(name=blank))

        assert [e.columns for _, e in assembler.entities()] == [["a"], ["b"]]


class TestForeignKeyAssembler:
    """Tests for ForeignKeyAssembler."""

    @staticmethod
    def _factory(target_schema="public", target_table="customers"):
        return lambda: ForeignKey(name="fk", target_schema=target_schema, target_table=target_table)

    def test_pairs_columns(self):
        assembler = ForeignKeyAssembler()

        fk, _ = assembler.add_pair("public.orders", "fk", "tenant_id", ("public", "customers"), "tenant_id", self._factory())
        assembler.add_pair("public.orders", "fk", "customer_id", ("public", "customers"), "id", self._factory())
        assembler.verify()

        assert fk.column_pairs == [("tenant_id", "tenant_id"), ("customer_id", "id")]

    def test_target_mismatch(self):
        assembler = ForeignKeyAssembler()
        assembler.add_pair("public.orders", "fk", "customer_id", ("public", "customers"), "id", self._factory())

        with pytest.raises(InconsistentError):
            assembler.add_pair("public.orders", "fk", "region_id", ("public", "regions"), "id", self._factory())

    def test_verify_detects_count_mismatch(self):
        assembler = ForeignKeyAssembler()
        assembler.add_pair("public.orders", "fk", "customer_id", ("public", "customers"), "id", self._factory())
        assembler.add("public.orders", "fk", "tenant_id", self._factory())

        with pytest.raises(InconsistentError, match="count mismatch"):
            assembler.verify()
