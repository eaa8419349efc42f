"""Tests for the per-variant text renderers."""

from __future__ import annotations

import pytest

from specimen.core.printer import PrettyPrinter
from specimen.core.renderers import AnyRenderer, escape_string, format_float, format_int
from specimen.core.values import ResourceValue, UnknownValue
from specimen.utils.config import PrinterConfig
from specimen.utils.safe_access import qualified_name


def _print(value, **limits) -> str:
    return PrettyPrinter(PrinterConfig().merge(**limits)).pretty_print(value)


class Point:
    def __init__(self, x=1, y=2):
        self.x = x
        self.y = y


class Node:
    def __init__(self):
        self.me = self


class Leaf:
    def __init__(self):
        self.v = 1


class Holder:
    def __init__(self, leaf):
        self.a = leaf
        self.b = leaf


class Empty:
    pass


class Visibility:
    def __init__(self):
        self._p = 1
        self.__q = 2


class Wide:
    def __init__(self):
        for name in "abcde":
            setattr(self, name, 0)


# Scalars ---------------------------------------------------------------------------------------------------------------


@pytest.mark.parametrize(
    "value,expected",
    [
        (None, "null"),
        (True, "true"),
        (False, "false"),
        (42, "42"),
        (-7, "-7"),
        (1.0, "1.0"),
        (1.5, "1.5"),
        (-0.0, "-0.0"),
        (float("inf"), "INF"),
        (float("-inf"), "-INF"),
        (float("nan"), "NAN"),
    ],
)
def test_scalar_formats(value, expected):
    assert _print(value) == expected
    assert _print(value) == _print(value)


def test_format_float_integral():
    assert format_float(3.0) == "3.0"
    assert format_float(0.1) == "0.1"
    assert format_float(1e20) == "1e+20"


def test_huge_ints_print_in_full():
    assert _print(10**5000) == "1" + "0" * 5000
    assert _print(-(10**5000)) == "-1" + "0" * 5000


def test_format_int_pads_inner_chunks():
    assert format_int(10**4000 + 7) == "1" + "0" * 3999 + "7"
    assert format_int(-123) == "-123"


def test_unknown_and_resource_literals(renderer):
    assert str(renderer.render(UnknownValue())) == "unknown type"
    assert str(renderer.render(ResourceValue("stream", 3))) == "stream #3"


def test_open_file_is_a_stream(tmp_path):
    path = tmp_path / "data.txt"
    path.write_text("x")
    with open(path) as f:
        assert _print(f) == f"stream #{f.fileno()}"
    assert _print(f) == "stream #-1"


# Strings ---------------------------------------------------------------------------------------------------------------


def test_plain_string():
    assert _print("abc") == '"abc"'


def test_string_escapes():
    assert _print('say "hi"') == '"say \\"hi\\""'
    assert _print("back\\slash") == '"back\\\\slash"'
    assert _print("\r\v\f") == '"\\r\\v\\f"'
    assert _print("\x00\x1b\x7f") == '"\\x00\\x1b\\x7f"'


def test_non_ascii_printable_is_kept():
    assert _print("héllo") == '"héllo"'
    assert _print("\u200b") == '"\\u200b"'


def test_multi_line_string_is_split():
    assert _print("a\tb\nc") == '"a\tb\\n"\n"c"'


def test_multi_line_string_not_split():
    assert _print("a\nb", split_multi_line_strings=False) == '"a\\nb"'


def test_tab_escaping():
    assert _print("a\tb", escape_tabs_in_strings=True) == '"a\\tb"'


def test_string_truncation_has_no_closing_quote():
    assert _print("abcdef", max_string_length=3) == '"abc...'
    assert _print("abc", max_string_length=3) == '"abc"'


def test_bytes():
    assert _print(b"ab\xff\n", split_multi_line_strings=False) == 'b"ab\\xff\\n"'
    assert _print(bytearray(b"ok")) == 'b"ok"'
    assert _print(b"a\nb") == 'b"a\\n"\nb"b"'


def test_escape_string_is_memoized():
    escape_string.cache_clear()
    escape_string("memo")
    escape_string("memo")
    assert escape_string.cache_info().hits >= 1


# Sequences -------------------------------------------------------------------------------------------------------------


def test_empty_sequences():
    assert _print([]) == "list()"
    assert _print({}) == "dict()"
    assert _print(()) == "tuple()"


def test_short_list_is_one_line():
    assert _print([1, 2, 3]) == "list( 1, 2, 3 )"
    assert _print((1, "a")) == 'tuple( 1, "a" )'


def test_dict_with_string_keys():
    assert _print({"a": 1, "bb": 2}) == 'dict( "a" => 1, "bb" => 2 )'


def test_dict_with_list_like_keys_hides_keys():
    assert _print({0: "x", 1: "y"}) == 'dict( "x", "y" )'
    assert _print({1: "x"}) == 'dict( 1 => "x" )'


def test_wide_dict_is_multi_line_and_aligned():
    expected = "\n".join([
        "dict(",
        '    "alpha" => "xxxxxxxxxxxxxxxxxxxx",',
        '    "b"     => 2,',
        ")",
    ])
    assert _print({"alpha": "x" * 20, "b": 2}) == expected


def test_threshold_is_configurable():
    assert _print([1, 2, 3], multi_line_threshold=2) == "list(\n    1,\n    2,\n    3,\n)"


def test_truncated_list_is_block_with_marker():
    assert _print(list(range(1, 11)), max_array_entries=3).split("\n") == [
        "list(",
        "    1,",
        "    2,",
        "    3,",
        "    ...",
        ")",
    ]


def test_nested_multi_line_entries_are_grouped():
    text = _print([[1] * 40, 2])
    lines = text.split("\n")
    assert lines[0] == "list("
    assert lines[1] == "    list("
    # the nested block is followed by a blank separator before the next entry
    assert "" in lines
    assert lines[-2] == "    2,"


def test_self_containing_list_shows_recursion():
    a = []
    a.append(a)
    assert _print(a) == "#0 list( #0 list( *recursion* ) )"


def test_shared_siblings_are_expanded_with_same_id():
    shared = [1]
    assert _print([shared, shared]) == "list( #1 list( 1 ), #1 list( 1 ) )"


def test_distinct_equal_lists_are_not_marked():
    assert _print([[1], [1]]) == "list( list( 1 ), list( 1 ) )"


# Composites ------------------------------------------------------------------------------------------------------------


def test_object_fields():
    name = qualified_name(Point)
    assert _print(Point()) == f"{name} #0 {{\n    public $x = 1;\n    public $y = 2;\n}}"


def test_empty_object():
    assert _print(Empty()) == f"{qualified_name(Empty)} #0 {{}}"


def test_self_reference_is_already_printed():
    name = qualified_name(Node)
    assert _print(Node()) == f"{name} #0 {{\n    public $me = {name} #0 {{...}};\n}}"


def test_sibling_objects_expand_once():
    text = _print(Holder(Leaf()))
    leaf = qualified_name(Leaf)
    assert text.count(f"{leaf} #1 {{") == 1
    assert f"public $b = {leaf} #1 {{...}};" in text
    assert "        public $v = 1;" in text


def test_visibility_and_alignment():
    lines = _print(Visibility()).split("\n")
    assert lines[1] == "    protected $_p = 1;"
    assert lines[2] == "    private $__q  = 2;"


def test_object_truncation():
    text = _print(Wide(), max_object_properties=2)
    assert text.split("\n")[1:] == ["    public $a = 0;", "    public $b = 0;", "    ...", "}"]


def test_object_limit_is_monotonic():
    previous_fields: list[str] = []
    for limit in range(6):
        lines = _print(Wide(), max_object_properties=limit).split("\n")
        fields = [line for line in lines if line.strip().startswith("public")]
        assert fields[: len(previous_fields)] == previous_fields
        assert len(fields) == min(limit, 5)
        previous_fields = fields


def test_list_of_objects_ids():
    name = qualified_name(Empty)
    assert _print([Empty(), Empty()], multi_line_threshold=100) == f"list( {name} #0 {{}}, {name} #1 {{}} )"


# Variable names --------------------------------------------------------------------------------------------------------


def test_variable_names():
    renderer = AnyRenderer()
    assert str(renderer.render_variable("foo")) == "$foo"
    assert str(renderer.render_variable("my var")) == '${"my var"}'
    assert str(renderer.render_variable("1x")) == '${"1x"}'


def test_variable_cache_returns_copies():
    renderer = AnyRenderer()
    renderer.render_variable("foo").append_inline("bar")
    assert str(renderer.render_variable("foo")) == "$foo"
