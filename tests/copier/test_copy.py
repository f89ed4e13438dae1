"""Tests for copying records into typed mappings.

Covers key derivation, value conversion into the mapping's value type,
pointer handling, embedding and encapsulated fields.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, NewType

import numpy as np
import pytest
from pydantic import BaseModel, PrivateAttr

from structcopy import Ptr, copy_field
from structcopy.errors import TypeNonCopyableError

MapKey = NewType("MapKey", str)
MapValue = NewType("MapValue", np.int8)


@dataclass
class Pair:
    i: int = 0
    u: np.uint64 = np.uint64(0)


@dataclass
class KeyedPair:
    i: int = copy_field("i_key", default=0)
    u: np.uint64 = np.uint64(0)


@dataclass
class PtrPair:
    i: Ptr[int] | None = copy_field("i", default=None)
    u: np.uint64 = np.uint64(0)


@dataclass
class AnyPair:
    i: int = 0
    u: Any = None


@dataclass
class ListPair:
    i: list[int] = field(default_factory=list)
    u: list[np.uint64] = field(default_factory=list)


@dataclass
class Excluded:
    i: list[int] = copy_field("-", default_factory=list)
    u: np.uint64 = np.uint64(0)


@dataclass
class Node:
    ref: "Ptr[Node] | None" = None


@dataclass
class Hidden:
    _i: np.float32 = np.float32(0)


@dataclass
class Level3:
    i: int = copy_field("i", default=0)


@dataclass
class Level2:
    level3: Level3 = copy_field(embed=True, default_factory=Level3)


@dataclass
class Level1:
    level2: Level2 = copy_field(embed=True, default_factory=Level2)


@dataclass
class NilLevel2:
    level3: Ptr[Level3] | None = copy_field(embed=True, default=None)


@dataclass
class NilLevel1:
    level2: NilLevel2 = copy_field(embed=True, default_factory=NilLevel2)


@dataclass
class Tagged:
    i: int = 0
    _u: np.uint64 = copy_field("u", default=np.uint64(0))


@dataclass
class RequiredHidden:
    i: int = 0
    _u: np.uint64 = copy_field("u,required", default=np.uint64(0))


@dataclass
class Untagged:
    i: int = 0
    _u: np.uint64 = np.uint64(0)


class Secret(BaseModel):
    name: str = "a"
    _token: str = PrivateAttr("t")
    _session: str = PrivateAttr()


class TestKeysAndValues:
    """Keys come from tags or field names; values take the mapping's value type."""

    def test_simple_copy(self, copier):
        dst = Ptr.to(dict[str, int])

        copier.copy(dst, Pair(i=1, u=np.uint64(2)))

        assert dst.value == {"i": 1, "u": 2}
        assert all(type(value) is int for value in dst.value.values())

    def test_dynamic_value_type_keeps_source_types(self, copier):
        dst = Ptr.to(dict[str, Any])

        copier.copy(dst, Pair(i=1, u=np.uint64(2)))

        assert dst.value == {"i": 1, "u": 2}
        assert type(dst.value["i"]) is int
        assert type(dst.value["u"]) is np.uint64

    def test_tag_overrides_key(self, copier):
        dst = Ptr.to(dict[str, int])

        copier.copy(dst, KeyedPair(i=1, u=np.uint64(2)))

        assert dst.value == {"i_key": 1, "u": 2}

    def test_named_key_and_value_types(self, copier):
        dst = Ptr.to(dict[MapKey, MapValue])

        copier.copy(dst, KeyedPair(i=1, u=np.uint64(2)))

        assert dst.value == {"i_key": 1, "u": 2}
        assert all(type(value) is np.int8 for value in dst.value.values())

    def test_lossy_narrowing_wraps(self, copier):
        dst = Ptr.to(dict[MapKey, MapValue])

        copier.copy(dst, KeyedPair(i=1, u=np.uint64(128)))

        assert dst.value == {"i_key": 1, "u": -128}

    def test_int_to_float(self, copier):
        dst = Ptr.to(dict[str, np.float32])

        copier.copy(dst, KeyedPair(i=1, u=np.uint64(2)))

        assert dst.value == {"i_key": 1.0, "u": 2.0}
        assert all(type(value) is np.float32 for value in dst.value.values())

    def test_dynamic_field(self, copier):
        dst = Ptr.to(dict[str, int])

        copier.copy(dst, AnyPair(i=1, u=2))

        assert dst.value == {"i": 1, "u": 2}

    def test_sequence_values(self, copier):
        source = ListPair(i=[1, 2], u=[np.uint64(11), np.uint64(22)])
        dst = Ptr.to(dict[str, list[int]])

        copier.copy(dst, source)

        assert dst.value == {"i": [1, 2], "u": [11, 22]}
        assert dst.value["i"] is not source.i

    def test_excluded_field(self, copier):
        dst = Ptr.to(dict[str, int])

        copier.copy(dst, Excluded(i=[1, 2], u=np.uint64(22)))

        assert dst.value == {"u": 22}

    def test_existing_entries_are_kept_and_overwritten(self, copier):
        existing = {"u": 99, "other": 7}
        dst = Ptr(existing, dict[str, int])

        copier.copy(dst, Pair(i=1, u=np.uint64(2)))

        assert dst.value is existing
        assert existing == {"u": 2, "other": 7, "i": 1}

    def test_untyped_destination_takes_string_keys(self, copier):
        dst = Ptr({})

        copier.copy(dst, Pair(i=1, u=np.uint64(2)))

        assert dst.value == {"i": 1, "u": 2}
        assert type(dst.value["u"]) is np.uint64

    def test_any_key_type(self, copier):
        assert copier.to_map(Pair(i=1), map_type=dict[Any, int]) == {"i": 1, "u": 0}
        assert copier.to_map(Pair(i=1), map_type=dict) == {"i": 1, "u": 0}

    def test_abstract_mapping_type_allocates_dict(self, copier):
        result = copier.to_map(Pair(i=1), map_type=Mapping[str, int])

        assert result == {"i": 1, "u": 0}
        assert type(result) is dict


class TestPointers:
    def test_pointer_field_is_dereferenced(self, copier):
        dst = Ptr.to(dict[str, int])

        copier.copy(dst, PtrPair(i=Ptr(1), u=np.uint64(2)))

        assert dst.value == {"i": 1, "u": 2}

    def test_nil_pointer_field_becomes_zero(self, copier):
        dst = Ptr({}, dict[str, int])

        copier.copy(dst, PtrPair(i=None, u=np.uint64(2)))

        assert dst.value == {"i": 0, "u": 2}

    def test_value_into_pointer_values(self, copier):
        dst = Ptr.to(dict[str, Ptr[int]])

        copier.copy(dst, KeyedPair(i=1, u=np.uint64(2)))

        assert dst.value == {"i_key": Ptr(1), "u": Ptr(2)}

    def test_pointer_values_are_fresh_cells(self, copier):
        cell = Ptr(1)
        dst = Ptr.to(dict[str, Ptr[int]])

        copier.copy(dst, PtrPair(i=cell))

        assert dst.value["i"] == cell
        assert dst.value["i"] is not cell

    def test_finite_pointer_chain_is_copied_fully(self, copier):
        source = Node(ref=Ptr(Node(ref=Ptr(Node()))))
        dst = Ptr.to(dict[str, Ptr[Node]])

        copier.copy(dst, source)

        assert dst.value == {"ref": Ptr(Node(ref=Ptr(Node())))}
        assert dst.value["ref"].value is not source.ref.value

    def test_nil_source_copies_nothing(self, copier):
        assert copier.to_map(Ptr(None, Pair)) == {}


class TestEmbedding:
    def test_deeply_embedded_field_is_promoted(self, copier):
        dst = Ptr.to(dict[str, int])

        copier.copy(dst, Ptr(Level1(Level2(Level3(i=1)))))

        assert dst.value == {"i": 1}

    def test_nil_embedded_pointer_is_skipped(self, copier):
        dst = Ptr.to(dict[str, int])

        copier.copy(dst, Ptr(NilLevel1()))

        assert dst.value == {}

    def test_embedded_pointer_is_followed(self, copier):
        source = NilLevel1(NilLevel2(level3=Ptr(Level3(i=5))))

        assert copier.to_map(source, map_type=dict[str, int]) == {"i": 5}


class TestEncapsulatedFields:
    """Underscore fields are readable only when the source is passed as Ptr(record)."""

    def test_required_encapsulated_field_by_reference(self, copier):
        dst = Ptr.to(dict[str, int])

        copier.copy(dst, Ptr(RequiredHidden(i=1, _u=np.uint64(2))))

        assert dst.value == {"i": 1, "u": 2}

    def test_optional_encapsulated_field_by_value_is_skipped(self, copier):
        dst = Ptr.to(dict[str, int])

        copier.copy(dst, Tagged(i=1, _u=np.uint64(2)))

        assert dst.value == {"i": 1}

    def test_untagged_encapsulated_field_uses_its_name(self, copier):
        dst = Ptr.to(dict[str, int])

        copier.copy(dst, Ptr(Untagged(i=1, _u=np.uint64(2))))

        assert dst.value == {"i": 1, "_u": 2}

    def test_non_copyable_encapsulated_field_is_skipped(self, copier):
        """An encapsulated, non-required field never fails the copy."""
        dst = Ptr.to(dict[str, str])

        copier.copy(dst, Ptr(Hidden(np.float32(1))))

        assert dst.value == {}

    def test_visible_incompatible_field_still_fails(self, copier):
        dst = Ptr.to(dict[str, str])

        with pytest.raises(TypeNonCopyableError):
            copier.copy(dst, Ptr(Pair(i=1)))

    def test_model_private_attributes_by_reference(self, copier):
        dst = Ptr.to(dict[str, str])

        copier.copy(dst, Ptr(Secret()))

        assert dst.value == {"name": "a", "_token": "t"}

    def test_model_private_attributes_by_value_are_skipped(self, copier):
        dst = Ptr.to(dict[str, str])

        copier.copy(dst, Secret())

        assert dst.value == {"name": "a"}
