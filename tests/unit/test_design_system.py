"""Tests for the minimal host: candidate building, variant order, CSS helpers."""

from twcompat.css import Declaration, Rule, escape_class, from_object, print_nodes, property_name
from twcompat.design_system import DesignSystem, split_candidate
from twcompat.plugins import plugin, run_plugins
from twcompat.utilities import UtilityRegistry, split_selector
from twcompat.variants import Origin, register_theme_variants


def underline(api):
    api.add_utilities({".underline-x": {"textDecorationLine": "underline"}})


class TestBuild:
    """Tests for DesignSystem.build."""

    def test_variant_wraps_utility(self, make_design_system):
        ds = make_design_system()
        run_plugins(ds, [plugin(underline)])

        assert ds.build(["print:underline-x"]) == (
            ".print\\:underline-x {\n"
            "  @media print {\n"
            "    text-decoration-line: underline;\n"
            "  }\n"
            "}\n"
        )

    def test_stacked_variants_outermost_first(self, make_design_system):
        ds = make_design_system()
        ds.add_css_variant("dark", "&:where(.dark, .dark *)")
        ds.add_css_variant("hover", "&:hover")
        run_plugins(ds, [plugin(underline)])

        css = ds.build(["dark:hover:underline-x"])

        assert css.index("&:where(.dark, .dark *)") < css.index("&:hover")

    def test_theme_variant_order_print_last(self, make_design_system):
        ds = make_design_system()
        theme = {
            "aria": {"polite": 'live="polite"'},
            "data": {"checked": 'ui~="checked"'},
            "supports": {"foo": "bar"},
        }
        register_theme_variants(ds.variants, lambda family: theme.get(family))
        run_plugins(ds, [plugin(underline)])

        css = ds.build(
            [
                "print:underline-x",
                "supports-foo:underline-x",
                "data-checked:underline-x",
                "aria-polite:underline-x",
                "underline-x",
            ]
        )
        selectors = [line for line in css.splitlines() if line.startswith(".")]

        assert selectors == [
            ".underline-x {",
            ".aria-polite\\:underline-x {",
            ".data-checked\\:underline-x {",
            ".supports-foo\\:underline-x {",
            ".print\\:underline-x {",
        ]

    def test_breakpoint_variants(self, make_design_system):
        ds = make_design_system(css={"--breakpoint-md": "50rem"})
        run_plugins(ds, [plugin(underline)])

        css = ds.build(["max-md:underline-x", "sm:underline-x"])

        assert "@media (width >= 40rem)" in css
        assert "@media (width < 50rem)" in css
        assert css.index("sm\\:") < css.index("max-md\\:")

    def test_unknown_candidates_skipped(self, make_design_system):
        ds = make_design_system()
        run_plugins(ds, [plugin(underline)])

        assert ds.build(["flex", "wat:underline-x"]) == ""

    def test_duplicates_built_once(self, make_design_system):
        ds = make_design_system()
        run_plugins(ds, [plugin(underline)])
        assert ds.build(["underline-x", "underline-x"]).count(".underline-x {") == 1

    def test_css_variant_beats_plugin(self, make_design_system):
        ds = make_design_system()
        ds.add_css_variant("dark", "&:is(.my-dark)")

        def dark(api):
            api.add_variant("dark", "&:is(.dark-plugin)")

        [contribution] = run_plugins(ds, [plugin(dark)])

        assert contribution.variants == []
        assert ds.variants.get("dark").origin is Origin.CSS

    def test_theme_css(self):
        ds = DesignSystem.from_theme(defaults={"--color-red": "red"}, css={"--color-ink": "#000"})
        assert ds.theme_css() == ":root {\n  --color-ink: #000;\n}\n"


def test_split_candidate():
    assert split_candidate("md:hover:underline") == ["md", "hover", "underline"]
    assert split_candidate("bg-[url(a:b)]") == ["bg-[url(a:b)]"]
    assert split_candidate("data-[state=open]:flex") == ["data-[state=open]", "flex"]


class TestCss:
    """Tests for the CSS node helpers."""

    def test_property_name(self):
        assert property_name("backgroundColor") == "background-color"
        assert property_name("WebkitAppearance") == "-webkit-appearance"
        assert property_name("--tw-ring") == "--tw-ring"
        assert property_name("color") == "color"

    def test_from_object(self):
        nodes = from_object(
            {
                "color": "red",
                "margin": None,
                "display": ["-webkit-box", "flex"],
                "@media print": {"display": "none"},
            }
        )
        assert nodes == [
            Declaration("color", "red"),
            Declaration("display", "-webkit-box"),
            Declaration("display", "flex"),
            Rule("@media print", [Declaration("display", "none")]),
        ]

    def test_print_nodes(self):
        nodes = [Rule(".a", [Declaration("color", "red")])]
        assert print_nodes(nodes) == ".a {\n  color: red;\n}\n"

    def test_escape_class(self):
        assert escape_class("hover:bg-[#fff]") == "hover\\:bg-\\[\\#fff\\]"
        assert escape_class("w-1/2") == "w-1\\/2"


class TestUtilityRegistry:
    """Tests for utility registration."""

    def test_split_selector(self):
        assert split_selector(".btn:hover, .link") == [("btn", ":hover"), ("link", "")]
        assert split_selector("div > .x") == []

    def test_css_utility_not_replaced(self):
        registry = UtilityRegistry()
        registry.add_static("btn", [Declaration("color", "red")], Origin.CSS)

        assert registry.add_static("btn", [Declaration("color", "blue")], Origin.PLUGIN) is False
        assert registry.compile("btn") == [Declaration("color", "red")]

    def test_functional_default_value(self):
        from twcompat.utilities import FunctionalUtility

        registry = UtilityRegistry()
        registry.add_functional(
            FunctionalUtility("tab", lambda value: {"tabSize": value}, {"DEFAULT": "4", "2": "2"})
        )

        assert registry.compile("tab") == [Declaration("tab-size", "4")]
        assert registry.compile("tab-2") == [Declaration("tab-size", "2")]
        assert registry.compile("tab-[7]") == [Declaration("tab-size", "7")]
        assert "tab-9" not in registry
