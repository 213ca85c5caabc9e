#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for MathML to TeX conversion."""

import pytest

from docodec.exceptions import MalformedInputError
from docodec.utils.math import mathml_to_tex, to_tex


@pytest.mark.unit
class TestMathmlToTex:
    """Tests for converting presentation MathML."""

    @pytest.mark.parametrize(
        "mathml,expected",
        [
            ("<math><msup><mi>x</mi><mn>2</mn></msup></math>", "x^2"),
            ("<math><msub><mi>a</mi><mi>ij</mi></msub></math>", r"a_{\mathrm{ij}}"),
            ("<math><mfrac><mn>1</mn><mi>n</mi></mfrac></math>", r"\frac{1}{n}"),
            ("<math><msqrt><mi>x</mi></msqrt></math>", r"\sqrt{x}"),
            ("<math><mroot><mi>x</mi><mn>3</mn></mroot></math>", r"\sqrt[3]{x}"),
            ("<math><mi>α</mi><mo>+</mo><mi>b</mi></math>", r"\alpha +b"),
            ("<math><mover><mi>x</mi><mo>¯</mo></mover></math>", r"\bar{x}"),
            ("<math><mtext>if</mtext></math>", r"\text{if}"),
        ],
    )
    def test_elements(self, mathml, expected):
        """Test individual presentation elements."""
        assert mathml_to_tex(mathml) == expected

    def test_namespaced(self):
        """Test MathML with the MathML namespace."""
        mathml = '<mml:math xmlns:mml="http://www.w3.org/1998/Math/MathML"><mml:mi>y</mml:mi></mml:math>'
        assert mathml_to_tex(mathml) == "y"

    def test_tex_annotation_preferred(self):
        """Test that a TeX annotation is used verbatim."""
        mathml = (
            "<math><semantics><mi>x</mi>"
            '<annotation encoding="application/x-tex">\\hat{x}</annotation>'
            "</semantics></math>"
        )
        assert mathml_to_tex(mathml) == r"\hat{x}"

    def test_unknown_elements(self):
        """Test that unknown elements contribute their children."""
        assert mathml_to_tex("<math><mstyle><mi>z</mi></mstyle></math>") == "z"

    def test_invalid(self):
        """Test that malformed MathML raises."""
        with pytest.raises(MalformedInputError):
            mathml_to_tex("<math><mi>x</math>")


@pytest.mark.unit
class TestToTex:
    """Tests for converting math of any language to TeX."""

    def test_tex_unchanged(self):
        """Test that TeX passes through."""
        assert to_tex("x^2", "tex") == "x^2"
        assert to_tex("x^2", None) == "x^2"

    def test_mathml(self):
        """Test that MathML is converted."""
        assert to_tex("<math><mi>x</mi></math>", "MathML") == "x"

    def test_unknown_language(self, caplog):
        """Test that other languages pass through with a warning."""
        assert to_tex("x", "asciimath") == "x"
        assert "asciimath" in caplog.text
