"""
Unit tests for resolving legacy theme blocks into the namespace.

Covers precedence, tuple companions, theme functions, the accessor and
palette flattening.
"""

import pytest

from twcompat.settings import CompatSettings, ThemeKeySpec, default_theme_keys
from twcompat.theme import (
    ThemeBridge,
    ThemeNamespace,
    ThemeSource,
    emit,
    flatten_color_palette,
    resolve_namespace,
    to_css,
    with_alpha,
)
from twcompat.values import ThemeTuple


@pytest.fixture
def bridge(make_design_system) -> ThemeBridge:
    return make_design_system().bridge


class TestExtend:
    """Tests for theme.extend."""

    def test_new_color_emitted(self, bridge):
        bridge.apply({"extend": {"colors": {"primary": "#c0ffee"}}})

        assert emit(bridge.namespace) == [("--color-primary", "#c0ffee")]
        assert bridge.namespace.value("--color-red-500") == "#ef4444"

    def test_nested_colors_flatten(self, bridge):
        bridge.apply({"extend": {"colors": {"brand": {"DEFAULT": "#111", "200": "#222"}}}})

        assert bridge.namespace.value("--color-brand") == "#111"
        assert bridge.namespace.value("--color-brand-200") == "#222"

    def test_unchanged_value_not_emitted(self, bridge):
        bridge.apply({"extend": {"colors": {"red": {"500": "#ef4444"}}}})
        assert emit(bridge.namespace) == []

    def test_css_wins_over_config(self, make_design_system):
        ds = make_design_system(css={"--color-slate-200": "#css"})
        ds.bridge.apply({"extend": {"colors": {"slate": {"200": "#config", "900": "#0f172a"}}}})

        assert ds.theme.value("--color-slate-200") == "#css"
        assert ds.theme.value("--color-slate-900") == "#0f172a"
        assert ds.bridge.accessor("colors.slate.200") == "#css"

    def test_mapping_leaf_rejected_for_flat_key(self, bridge):
        bridge.apply({"extend": {"fontSize": {"lg": {"foo": "bar"}}}})
        assert "--font-size-lg" not in bridge.namespace
        assert emit(bridge.namespace) == []

    def test_list_value_joined(self, bridge):
        bridge.apply({"extend": {"fontFamily": {"display": ["Oswald", "sans-serif"]}}})
        assert bridge.namespace.value("--font-family-display") == "Oswald, sans-serif"


class TestReplace:
    """Tests for bare theme keys."""

    def test_bare_key_drops_baseline(self, bridge):
        bridge.apply({"colors": {"brand": "#123456"}})

        assert "--color-red-500" not in bridge.namespace
        assert bridge.accessor("colors") == {"brand": "#123456"}

    def test_bare_key_keeps_css(self, make_design_system):
        ds = make_design_system(css={"--color-ink": "#000"})
        ds.bridge.apply({"colors": {"brand": "#123456"}})

        assert ds.bridge.accessor("colors") == {"ink": "#000", "brand": "#123456"}

    def test_bare_and_extend_combine(self, bridge):
        bridge.apply({"colors": {"brand": "#1"}, "extend": {"colors": {"accent": "#2"}}})
        assert bridge.accessor("colors") == {"brand": "#1", "accent": "#2"}


class TestTuples:
    """Tests for tuple values and per-companion precedence."""

    def test_css_wins_per_property(self, make_design_system):
        ds = make_design_system(
            css={
                "--font-size-base": "100rem",
                "--font-size-md--line-height": "101rem",
            }
        )
        ds.theme.add_default("--font-size-md", "0rem")
        tuple_value = ["200rem", {"lineHeight": "201rem"}]

        ds.bridge.apply(
            {"extend": {"fontSize": {"base": tuple_value, "md": tuple_value, "xl": tuple_value}}}
        )

        assert ds.theme.value("--font-size-base") == "100rem"
        assert ds.theme.value("--font-size-base--line-height") == "201rem"
        assert ds.theme.value("--font-size-md") == "200rem"
        assert ds.theme.value("--font-size-md--line-height") == "101rem"
        assert ds.theme.value("--font-size-xl") == "200rem"
        assert ds.theme.value("--font-size-xl--line-height") == "201rem"

    def test_companion_only_override(self, bridge):
        bridge.apply({"extend": {"fontSize": {"base": ["1rem", {"lineHeight": "2rem"}]}}})

        assert emit(bridge.namespace) == [("--font-size-base--line-height", "2rem")]

    def test_tuple_read_both_ways(self, bridge):
        value = bridge.accessor("fontSize.base")

        assert value == ThemeTuple("1rem", {"lineHeight": "1.5rem"})
        assert value[0] == "1rem"
        assert bridge.accessor("fontSize.base[1].lineHeight") == "1.5rem"

    def test_mapping_does_not_replace_tuple(self, bridge):
        bridge.apply({"extend": {"fontSize": {"base": {"oops": "1"}}}})
        assert emit(bridge.namespace) == []


class TestThemeFunctions:
    """Tests for function-valued theme branches."""

    def test_function_reads_earlier_keys(self, make_design_system):
        ds = make_design_system(
            css={"--font-size-base": "100rem", "--font-size-base--line-height": "101rem"}
        )
        ds.bridge.apply(
            {
                "extend": {
                    "lineHeight": lambda theme: {"base": theme("fontSize.base[1].lineHeight")},
                    "typography": lambda theme: {
                        "size": theme("fontSize.base")[0],
                        "leading": theme("fontSize.base")[1]["lineHeight"],
                    },
                }
            }
        )

        assert ds.theme.value("--line-height-base") == "101rem"
        assert ds.bridge.accessor("typography.size") == "100rem"
        assert ds.bridge.accessor("typography.leading") == "101rem"

    def test_function_sees_extended_sibling(self, bridge):
        bridge.apply(
            {
                "extend": {
                    "colors": {"primary": "#c0ffee"},
                    "boxShadow": lambda theme: {"glow": f"0 0 4px {theme('colors.primary')}"},
                }
            }
        )
        assert bridge.namespace.value("--shadow-glow") == "0 0 4px #c0ffee"

    def test_forward_reference_gets_default(self, bridge):
        bridge.apply(
            {
                "extend": {
                    "lineHeight": lambda theme: {"x": theme("spacing.4", "none")},
                    "spacing": {"4": "1rem"},
                }
            }
        )
        assert bridge.namespace.value("--line-height-x") == "none"
        assert bridge.namespace.value("--spacing-4") == "1rem"

    def test_plugin_extension_reads_config_value(self, bridge):
        bridge.apply({"extend": {"colors": lambda theme: {"a": "#a"}}})
        bridge.extend({"colors": lambda theme: {"b": theme("colors.a")}}, ThemeSource.PLUGIN)

        assert bridge.namespace.value("--color-a") == "#a"
        assert bridge.namespace.value("--color-b") == "#a"
        assert bridge.namespace.get("--color-b").source is ThemeSource.PLUGIN


class TestAccessor:
    """Tests for the theme() accessor."""

    def test_missing_returns_default(self, bridge):
        assert bridge.accessor("colors.nope") is None
        assert bridge.accessor("colors.nope", "x") == "x"
        assert bridge.accessor("") is None

    def test_group_lookup(self, bridge):
        assert bridge.accessor("colors.slate") == {"200": "#e2e8f0", "500": "#64748b"}

    def test_opacity_modifier(self, bridge):
        assert bridge.accessor("colors.red.500 / 50%") == (
            "color-mix(in oklab, #ef4444 50%, transparent)"
        )
        assert bridge.accessor("colors.red.500 / 0.25") == (
            "color-mix(in oklab, #ef4444 25%, transparent)"
        )

    def test_legacy_only_keys(self, bridge):
        bridge.apply({"extend": {"aria": {"polite": 'live="polite"'}}})
        assert bridge.accessor("aria") == {"polite": 'live="polite"'}
        assert "--aria-polite" not in bridge.namespace


class TestResolveNamespace:
    """Tests for resolve_namespace and emission."""

    def test_baseline_untouched_and_idempotent(self, make_design_system):
        baseline = make_design_system().theme
        theme = {"extend": {"colors": {"primary": "#c0ffee"}, "spacing": {"4": "1rem"}}}

        first = resolve_namespace(theme, baseline)
        second = resolve_namespace(theme, baseline)

        assert first == second
        assert "--color-primary" not in baseline
        assert first.value("--color-primary") == "#c0ffee"

    def test_to_css(self):
        namespace = ThemeNamespace()
        namespace.add_css("--color-primary", "#c0ffee")

        assert to_css(emit(namespace)) == ":root {\n  --color-primary: #c0ffee;\n}\n"
        assert to_css([]) == ""

    def test_custom_theme_key(self):
        keys = default_theme_keys()
        keys["tabSize"] = ThemeKeySpec(namespace="--tab-size")
        settings = CompatSettings(theme_keys=keys)

        namespace = resolve_namespace(
            {"extend": {"tabSize": {"wide": "8"}}}, ThemeNamespace(), settings
        )
        assert namespace.emit() == [("--tab-size-wide", "8")]


class TestColorHelpers:
    """Tests for palette helpers."""

    def test_flatten_color_palette(self):
        palette = {
            "slate": {"200": "#e2e8f0", "DEFAULT": "#64748b"},
            "white": "#fff",
            "brand": {"light": {"DEFAULT": "#eee", "hover": "#ddd"}},
        }
        assert flatten_color_palette(palette) == {
            "slate-200": "#e2e8f0",
            "slate": "#64748b",
            "white": "#fff",
            "brand-light": "#eee",
            "brand-light-hover": "#ddd",
        }

    def test_flatten_non_mapping(self):
        assert flatten_color_palette("red") == {}

    def test_with_alpha_full_opacity(self):
        assert with_alpha("#000", "100%") == "#000"
