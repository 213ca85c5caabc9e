#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/utils/math.py
"""Conversion of MathML to TeX.

Markdown can only carry TeX math, so math decoded from JATS (MathML) is
converted before it is encoded. The converter covers presentation MathML
as found in journal articles; an ``<annotation encoding="application/x-tex">``
is used verbatim when present. Unknown elements contribute the TeX of their
children.

"""

from __future__ import annotations

import logging
from typing import Any

from docodec.exceptions import MalformedInputError

logger = logging.getLogger(__name__)

_SYMBOLS = {
    "α": r"\alpha",
    "β": r"\beta",
    "γ": r"\gamma",
    "δ": r"\delta",
    "ε": r"\epsilon",
    "ζ": r"\zeta",
    "η": r"\eta",
    "θ": r"\theta",
    "κ": r"\kappa",
    "λ": r"\lambda",
    "μ": r"\mu",
    "ν": r"\nu",
    "ξ": r"\xi",
    "π": r"\pi",
    "ρ": r"\rho",
    "σ": r"\sigma",
    "τ": r"\tau",
    "φ": r"\phi",
    "χ": r"\chi",
    "ψ": r"\psi",
    "ω": r"\omega",
    "Γ": r"\Gamma",
    "Δ": r"\Delta",
    "Θ": r"\Theta",
    "Λ": r"\Lambda",
    "Π": r"\Pi",
    "Σ": r"\Sigma",
    "Φ": r"\Phi",
    "Ψ": r"\Psi",
    "Ω": r"\Omega",
    "×": r"\times",
    "·": r"\cdot",
    "⋅": r"\cdot",
    "÷": r"\div",
    "±": r"\pm",
    "∓": r"\mp",
    "≤": r"\leq",
    "≥": r"\geq",
    "≠": r"\neq",
    "≈": r"\approx",
    "≡": r"\equiv",
    "∼": r"\sim",
    "∝": r"\propto",
    "∞": r"\infty",
    "∑": r"\sum",
    "∏": r"\prod",
    "∫": r"\int",
    "∂": r"\partial",
    "∇": r"\nabla",
    "∈": r"\in",
    "∉": r"\notin",
    "⊂": r"\subset",
    "⊆": r"\subseteq",
    "∪": r"\cup",
    "∩": r"\cap",
    "→": r"\rightarrow",
    "←": r"\leftarrow",
    "⇒": r"\Rightarrow",
    "↔": r"\leftrightarrow",
    "∀": r"\forall",
    "∃": r"\exists",
    "¬": r"\neg",
    "∧": r"\wedge",
    "∨": r"\vee",
    "…": r"\ldots",
    "⋯": r"\cdots",
    "′": "'",
    "−": "-",
}

_ACCENTS = {"^": r"\hat", "¯": r"\bar", "~": r"\tilde", "˙": r"\dot", "→": r"\vec"}


def _local(tag: Any) -> str:
    return tag.rsplit("}", 1)[-1] if isinstance(tag, str) else ""


def _text(value: str) -> str:
    out = []
    for char in value.strip():
        symbol = _SYMBOLS.get(char)
        if symbol is None:
            out.append(char)
        elif symbol.startswith("\\") and symbol[-1].isalpha():
            out.append(symbol + " ")
        else:
            out.append(symbol)
    return "".join(out).strip() if len(out) > 1 else "".join(out)


def _group(tex: str) -> str:
    return tex if len(tex) == 1 else "{" + tex + "}"


class _Converter:
    def convert(self, elem: Any) -> str:
        tag = _local(elem.tag)
        handler = getattr(self, f"_convert_{tag}", None)
        if handler is not None:
            return handler(elem)
        return self._children(elem)

    def _children(self, elem: Any) -> str:
        return "".join(self.convert(child) for child in elem)

    def _args(self, elem: Any) -> list[str]:
        return [self.convert(child) for child in elem]

    def _convert_semantics(self, elem: Any) -> str:
        for child in elem:
            if _local(child.tag) == "annotation" and child.get("encoding") in ("application/x-tex", "TeX", "LaTeX"):
                return (child.text or "").strip()
        children = [child for child in elem if not _local(child.tag).startswith("annotation")]
        return self.convert(children[0]) if children else ""

    def _convert_annotation(self, elem: Any) -> str:
        return ""

    def _convert_mi(self, elem: Any) -> str:
        text = _text(elem.text or "")
        if len(text) > 1 and not text.startswith("\\") and elem.get("mathvariant") != "italic":
            return r"\mathrm{" + text + "}"
        return text

    def _convert_mn(self, elem: Any) -> str:
        return _text(elem.text or "")

    def _convert_mo(self, elem: Any) -> str:
        return _text(elem.text or "")

    def _convert_mtext(self, elem: Any) -> str:
        text = (elem.text or "").strip()
        return r"\text{" + text + "}" if text else ""

    def _convert_mspace(self, elem: Any) -> str:
        return r"\,"

    def _convert_msup(self, elem: Any) -> str:
        base, sup = (self._args(elem) + ["", ""])[:2]
        return f"{base}^{_group(sup)}"

    def _convert_msub(self, elem: Any) -> str:
        base, sub = (self._args(elem) + ["", ""])[:2]
        return f"{base}_{_group(sub)}"

    def _convert_msubsup(self, elem: Any) -> str:
        base, sub, sup = (self._args(elem) + ["", "", ""])[:3]
        return f"{base}_{_group(sub)}^{_group(sup)}"

    def _convert_munder(self, elem: Any) -> str:
        return self._convert_msub(elem)

    def _convert_munderover(self, elem: Any) -> str:
        return self._convert_msubsup(elem)

    def _convert_mover(self, elem: Any) -> str:
        base, over = (self._args(elem) + ["", ""])[:2]
        accent = _ACCENTS.get(over.strip())
        if accent:
            return f"{accent}{{{base}}}"
        return f"{base}^{_group(over)}"

    def _convert_mfrac(self, elem: Any) -> str:
        num, den = (self._args(elem) + ["", ""])[:2]
        return rf"\frac{{{num}}}{{{den}}}"

    def _convert_msqrt(self, elem: Any) -> str:
        return rf"\sqrt{{{self._children(elem)}}}"

    def _convert_mroot(self, elem: Any) -> str:
        base, index = (self._args(elem) + ["", ""])[:2]
        return rf"\sqrt[{index}]{{{base}}}"

    def _convert_mfenced(self, elem: Any) -> str:
        open_, close = elem.get("open", "("), elem.get("close", ")")
        separator = elem.get("separators", ",")[:1]
        return rf"\left{open_}" + separator.join(self._args(elem)) + rf"\right{close}"

    def _convert_mtable(self, elem: Any) -> str:
        rows = [" & ".join(self._args(row)) for row in elem if _local(row.tag) in ("mtr", "mlabeledtr")]
        return r"\begin{matrix}" + r" \\ ".join(rows) + r"\end{matrix}"


def mathml_to_tex(mathml: str) -> str:
    """Convert a MathML string to TeX.

    Parameters
    ----------
    mathml : str
        A ``<math>`` element, with or without the MathML namespace

    Returns
    -------
    str
        TeX source

    Raises
    ------
    MalformedInputError
        If ``mathml`` is not well-formed XML

    Examples
    --------
    >>> mathml_to_tex("<math><msup><mi>x</mi><mn>2</mn></msup></math>")
    'x^2'

    """
    from defusedxml import ElementTree
    from xml.etree.ElementTree import ParseError

    try:
        root = ElementTree.fromstring(mathml.strip())
    except ParseError as e:
        raise MalformedInputError("Invalid MathML", snippet=mathml, original_error=e) from e
    return _Converter().convert(root).strip()


def to_tex(text: str, math_language: str | None) -> str:
    """Return ``text`` as TeX, converting from MathML when needed.

    Languages other than TeX and MathML are passed through with a warning.
    """
    language = (math_language or "tex").lower()
    if language in ("tex", "latex"):
        return text
    if language == "mathml":
        return mathml_to_tex(text)
    logger.warning(f"Unable to convert math language '{math_language}' to TeX; passing through unchanged")
    return text
