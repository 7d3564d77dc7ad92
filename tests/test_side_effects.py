from __future__ import annotations

import pytest

from parse.treesitter_calls import extract_console_calls
from parse.treesitter_js import parse_source


def _side_effect_flags(source: str) -> list[bool]:
    unit = parse_source(source, path="a.js")
    return [site.has_side_effects for site in extract_console_calls(unit)]


@pytest.mark.parametrize(
    "source",
    [
        "console.log(i++);\n",
        "console.log(--i);\n",
        "console.log(x = 1);\n",
        "console.log(x += 1);\n",
        "console.log(a ||= b);\n",
        "console.log('v', [1, { k: (n = 2) }]);\n",
        "async function f() { console.log(await load()); }\n",
        "function* g() { console.log(yield 1); }\n",
        "console.log(() => { count++; });\n",
        "console.log(function () { state.value = 1; });\n",
    ],
)
def test_effectful_arguments_are_flagged(source: str) -> None:
    assert _side_effect_flags(source) == [True]


@pytest.mark.parametrize(
    "source",
    [
        "console.log();\n",
        "console.log('text', 42, null, undefined);\n",
        "console.log(a.b.c, a[0], `t ${x}`);\n",
        "console.log({ k: v, ...rest }, [1, 2]);\n",
        "console.log(compute(x));\n",
        "console.log(x === 1 ? 'a' : 'b');\n",
    ],
)
def test_clean_arguments_are_not_flagged(source: str) -> None:
    assert _side_effect_flags(source) == [False]


def test_side_effect_outside_arguments_is_ignored() -> None:
    source = "i++;\nconsole.log(i);\n"

    assert _side_effect_flags(source) == [False]
