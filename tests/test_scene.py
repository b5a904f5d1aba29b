"""Tests for the scene graph and its SVG serialisation."""

from nbmolviz2d.scene import SceneElement


class TestSceneElement:
    def test_append_returns_child(self):
        root = SceneElement("svg")
        child = root.append("g", {"class": "node", "index": 0})
        assert root.children == [child]
        assert child.class_name == "node"
        assert child.get_attribute("index") == 0

    def test_set_attribute(self):
        el = SceneElement("circle")
        el.set_attribute("r", 5)
        assert el.attributes == {"r": 5}

    def test_find_all_walks_descendants(self):
        root = SceneElement("div")
        svg = root.append("svg")
        a = svg.append("g", {"class": "node"})
        svg.append("g", {"class": "link"})
        b = svg.append("g", {"class": "node"})
        assert root.find_all("node") == [a, b]

    def test_elements_compare_by_identity(self):
        assert SceneElement("g") != SceneElement("g")

    def test_clear(self):
        root = SceneElement("svg")
        root.append("g")
        root.clear()
        assert root.children == []


class TestToSvg:
    def test_self_closing(self):
        assert SceneElement("circle", {"r": 5}).to_svg() == '<circle r="5"/>'

    def test_style_names_kebab_cased(self):
        el = SceneElement("text", style={"fontSize": "12px", "fill": "red"}, text="C")
        assert el.to_svg() == '<text style="font-size: 12px; fill: red">C</text>'

    def test_text_is_escaped(self):
        el = SceneElement("text", text="<b>&</b>")
        assert "&lt;b&gt;&amp;&lt;/b&gt;" in el.to_svg()

    def test_floats_trimmed_and_none_skipped(self):
        el = SceneElement("line", {"x1": 1.5, "x2": 2.0, "y1": None})
        assert el.to_svg() == '<line x1="1.5" x2="2"/>'

    def test_svg_gets_namespace(self):
        svg = SceneElement("svg", {"width": 100})
        svg.append("g")
        out = svg.to_svg()
        assert out.startswith('<svg width="100" xmlns="http://www.w3.org/2000/svg">')
        assert out.endswith("<g/></svg>")
