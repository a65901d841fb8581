"""Unit tests for the core dispatcher and the generic container rules.

WHY: Variants, optionals, sequences and maps are handled once, in the
core, for every format. Getting variant order or error paths wrong
here shows up everywhere, so these rules are tested directly.

HOW: Drives serde_hub.core.dispatch with the JSON backend (whose native
tree is plain Python data, easy to assert on) and, where the behavior
is format-independent, parametrizes over every format.

RULES:
- Variant decode is first-match in declared order
- Only data errors make an alternative "not match"; logic errors escape
- Error paths name the field, key or position where decoding failed
"""

import collections
import enum
from datetime import timedelta
from typing import Any, Deque, Dict, List, Optional, Sequence, Tuple, Union

import pytest

from serde_hub import from_string, to_string
from serde_hub.backends.json_backend import JsonBackend
from serde_hub.core import dispatch
from serde_hub.core.classify import Kind, classify
from serde_hub.core.containers import held_alternative
from serde_hub.core.errors import (
    LogicError,
    MissingField,
    StructureError,
    UnknownEnumName,
    VariantNoMatch,
)

from samples import FORMATS, Client, Config, IntListOrMap, Mode, WithDefaults


@pytest.fixture
def json_backend():
    return JsonBackend()


def _unpack(tp, value):
    backend = JsonBackend()
    return dispatch.unpack(backend, tp, backend.make(value))


# =========================================================================
# Type classification
# =========================================================================

class TestClassify:
    """Target types map to the right conversion rule."""

    @pytest.mark.parametrize(
        "tp, kind",
        [
            (Client, Kind.RECORD),
            (Mode, Kind.ENUM),
            (Optional[int], Kind.OPTIONAL),
            (Union[int, str], Kind.VARIANT),
            (List[int], Kind.SEQUENCE),
            (Sequence[int], Kind.SEQUENCE),
            (Tuple[int, ...], Kind.SEQUENCE),
            (Deque[int], Kind.SEQUENCE),
            (Tuple[int, str], Kind.TUPLE),
            (set, Kind.SET),
            (Dict[str, int], Kind.MAP),
            (dict, Kind.MAP),
            (timedelta, Kind.DURATION),
            (int, Kind.LEAF),
            (Any, Kind.LEAF),
        ],
    )
    def test_kinds(self, tp, kind):
        assert classify(tp).kind is kind

    def test_optional_of_several_alternatives(self):
        shape = classify(Union[int, str, None])
        assert shape.kind is Kind.OPTIONAL
        assert classify(shape.args[0]).kind is Kind.VARIANT

    def test_union_order_is_kept_per_spelling(self):
        assert classify(Union[List[int], Dict[int, int]]).args == (List[int], Dict[int, int])
        assert classify(Union[Dict[int, int], List[int]]).args == (Dict[int, int], List[int])

    def test_bare_list_holds_any(self):
        assert classify(list).args == (Any,)


# =========================================================================
# Records and fields
# =========================================================================

class TestRecords:
    """Field resolution: present value, default, or MissingField."""

    def test_missing_field(self):
        with pytest.raises(MissingField) as excinfo:
            _unpack(Client, {"ip": "h"})
        assert str(excinfo.value) == "Client: missing field 'port'"

    def test_defaults_applied(self):
        assert _unpack(WithDefaults, {"name": "n"}) == WithDefaults("n", 3, [])

    def test_nested_error_path(self):
        doc = {"mode": "Internal", "clients": {"alpha": {"ip": "h"}}, "filters": []}
        with pytest.raises(MissingField) as excinfo:
            _unpack(Config, doc)
        assert excinfo.value.path == ["clients", "alpha"]
        assert str(excinfo.value) == "at clients.alpha: Client: missing field 'port'"

    def test_sequence_position_in_path(self):
        with pytest.raises(StructureError) as excinfo:
            _unpack(Config, {"mode": "Internal", "clients": {}, "filters": ["a", 3]})
        assert excinfo.value.location == "filters[1]"
        assert "expected string, got integer" in str(excinfo.value)

    def test_wrong_type_for_field(self):
        with pytest.raises(StructureError, match="at port: expected integer, got string"):
            _unpack(Client, {"ip": "h", "port": "80"})

    def test_pack_wrong_instance(self, json_backend):
        with pytest.raises(StructureError, match="expected Client, got str"):
            dispatch.pack(json_backend, Client, "not a client")

    def test_missing_field_message_through_api(self):
        result = from_string("json", Client, '{"ip": "h"}')
        assert result.error == "serde: on parsing string: Client: missing field 'port'"


# =========================================================================
# Enums
# =========================================================================

class TestEnumDispatch:
    """Enums travel as their symbolic names."""

    def test_unknown_name(self):
        with pytest.raises(UnknownEnumName, match="Mode: bad enum value 'Hybrid'"):
            _unpack(Mode, "Hybrid")

    def test_enum_from_non_string(self):
        with pytest.raises(StructureError, match="expected string"):
            _unpack(Mode, 1)

    @pytest.mark.parametrize("fmt", [f for f in FORMATS if f != "toml"])
    def test_name_fidelity(self, fmt):
        for member in Mode:
            data = to_string(fmt, member).value
            assert from_string(fmt, Mode, data).value is member
            assert from_string(fmt, str, data).value == member.name

    def test_bad_value_on_pack(self, json_backend):
        with pytest.raises(LogicError, match="bad enum value"):
            dispatch.pack_enum(json_backend, Mode, "Internal")


# =========================================================================
# Variants
# =========================================================================

class TestVariants:
    """First-match decode in declared order; pack by held alternative."""

    def test_decode_each_alternative(self):
        assert _unpack(IntListOrMap, 7) == 7
        assert _unpack(IntListOrMap, [1, 2]) == [1, 2]
        assert _unpack(IntListOrMap, [[1, 2]]) == {1: 2}

    def test_empty_map_decodes_as_list_in_json_family(self):
        data = to_string("json", {}, IntListOrMap).value
        assert data == "[]"
        assert from_string("json", IntListOrMap, data).value == []

    def test_empty_map_survives_in_yaml(self):
        data = to_string("yaml", {}, IntListOrMap).value
        assert from_string("yaml", IntListOrMap, data).value == {}

    def test_declared_order_decides(self):
        assert _unpack(Union[List[int], Dict[int, int]], []) == []
        assert _unpack(Union[Dict[int, int], List[int]], []) == {}

    def test_no_alternative_matches(self):
        with pytest.raises(VariantNoMatch) as excinfo:
            _unpack(Union[int, List[int]], "text")
        assert len(excinfo.value.attempts) == 2
        assert str(excinfo.value).startswith("no variant alternative matched (int: ")

    def test_logic_error_is_not_a_mismatch(self):
        class Unregistered(enum.Enum):
            A = 1

        with pytest.raises(LogicError, match="not registered"):
            _unpack(Union[Unregistered, int], 5)

    def test_bool_is_not_int(self):
        assert held_alternative((int, bool), True) is bool
        assert to_string("json", True, Union[int, bool]).value == "true"
        assert from_string("json", Union[int, bool], "true").value is True

    def test_int_packs_as_float_when_no_exact_match(self):
        assert held_alternative((str, float), 3) is float
        assert to_string("json", 3, Union[str, float]).value == "3.0"

    def test_value_matching_no_alternative(self, json_backend):
        with pytest.raises(StructureError, match="matches no alternative"):
            dispatch.pack(json_backend, Union[int, str], 1.5)

    def test_records_as_alternatives(self):
        value = _unpack(Union[Mode, Client], {"ip": "h", "port": 1})
        assert value == Client("h", 1)


# =========================================================================
# Sequences, tuples, maps, durations
# =========================================================================

class TestContainers:
    """Homogeneous containers rebuild their Python type."""

    def test_deque(self):
        value = _unpack(Deque[int], [1, 2])
        assert isinstance(value, collections.deque)
        assert list(value) == [1, 2]

    def test_set_packs_sorted(self, json_backend):
        assert dispatch.pack(json_backend, set, {3, 1, 2}).value == [1, 2, 3]

    def test_fixed_tuple_length(self):
        with pytest.raises(StructureError, match="expected a sequence of 2 items, got 1"):
            _unpack(Tuple[int, str], [1])

    def test_pack_tuple_length(self, json_backend):
        with pytest.raises(StructureError, match="expected a tuple of 2 items"):
            dispatch.pack(json_backend, Tuple[int, str], (1, "a", "extra"))

    def test_string_is_not_a_sequence(self, json_backend):
        with pytest.raises(StructureError, match="expected a sequence, got str"):
            dispatch.pack(json_backend, List[str], "abc")

    def test_map_key_in_error_path(self):
        with pytest.raises(StructureError) as excinfo:
            _unpack(Dict[str, int], {"good": 1, "bad": "x"})
        assert excinfo.value.path == ["bad"]

    def test_duration_from_integer(self):
        assert _unpack(timedelta, 90) == timedelta(minutes=1, seconds=30)

    def test_inferred_types(self, json_backend):
        assert dispatch.pack(json_backend, None, [1, "a"]).value == [1, "a"]
        assert dispatch.pack(json_backend, None, (1, 2)).value == [1, 2]

    def test_any_returns_native_tree(self):
        assert _unpack(Any, {"a": [1, None]}) == {"a": [1, None]}

    def test_float_accepts_int(self):
        value = _unpack(float, 2)
        assert value == 2.0
        assert isinstance(value, float)

    def test_int_rejects_bool(self):
        with pytest.raises(StructureError, match="expected integer, got boolean"):
            _unpack(int, True)

    def test_unsupported_leaf_type(self):
        class Opaque:
            pass

        with pytest.raises(LogicError, match="no conversion for type Opaque"):
            _unpack(Opaque, 1)
