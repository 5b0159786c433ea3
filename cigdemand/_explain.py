"""
Narrative explanation renderer for the tutorial's results.

Each public ``explain_*`` function takes a fitted result or report and
returns a formatted multi-line string in plain language.
"""
from __future__ import annotations

_SEP = "━" * 66


def _fmt_p(p: float) -> str:
    if p < 0.001:
        return "p < 0.001"
    return f"p = {p:.3f}"


def _fmt_ci(lo: float, hi: float) -> str:
    return f"[{lo:.4f}, {hi:.4f}]"


def _list_vars(names: list[str]) -> str:
    if len(names) == 1:
        return names[0]
    return ", ".join(names[:-1]) + f" and {names[-1]}"


def _unlogged(name: str) -> str:
    return name[len("log_"):] if name.startswith("log_") else name


def _elasticity_phrase(effect: float, treatment: str, outcome: str) -> str:
    direction = "rise" if effect >= 0 else "drop"
    return (
        f"a 1% increase in {_unlogged(treatment)} is associated with a "
        f"{abs(effect):.2f}% {direction} in {_unlogged(outcome)}"
    )


def _assumptions_section(assumptions: list) -> str:
    lines = ["ASSUMPTIONS"]
    for a in assumptions:
        checked = f"  (see: {a.checked_by})" if a.checked_by else ""
        lines.append(f"  {a.fmt_tag()}  {a.name}{checked}")
    return "\n".join(lines)


def explain_elasticity(result, label: str = "") -> str:
    """
    Interpret the price coefficient of a ``TwoStageResult`` or ``IVResult``
    as a demand elasticity.
    """
    T, Y = result._treatment, result._outcome
    lo, hi = result.conf_int
    controls = result.controls
    controls_note = f" holding {_list_vars(controls)} fixed" if controls else ""
    title = label or "Price elasticity of demand"

    elasticity = abs(result.effect)
    if elasticity > 1:
        reading = "Demand is price-elastic: spending on packs falls when prices rise."
    else:
        reading = "Demand is price-inelastic: spending on packs rises with prices."

    blocks = [
        "\n".join([_SEP, title, f"  {T} → {Y}  |  instrument: {result._instrument}", _SEP]),
        "\n".join([
            "RESULT",
            f"The estimate suggests that {_elasticity_phrase(result.effect, T, Y)}"
            f"{controls_note} (95% CI: {_fmt_ci(lo, hi)}, "
            f"{result.cov_type} SE = {result.std_err:.4f}, {_fmt_p(result.pvalue)}).",
            reading,
        ]),
    ]
    if hasattr(result, "assumptions"):
        blocks.append(_assumptions_section(result.assumptions))
    blocks.append(_SEP)
    return "\n\n".join(blocks)


def explain_endogeneity(report) -> str:
    """Interpret an ``EndogeneityReport`` in plain language."""
    T = report._treatment
    if report.endogenous:
        verdict = (
            f"The residuals of the uninstrumented regression are significant "
            f"(coefficient {report.residual_coefficient:.4f}, {_fmt_p(report.residual_pvalue)}). "
            f"{T} is correlated with the error term, so OLS is biased and the "
            f"instrumental-variables estimate is the one to report."
        )
    else:
        verdict = (
            f"The residuals of the uninstrumented regression are not significant "
            f"(coefficient {report.residual_coefficient:.4f}, {_fmt_p(report.residual_pvalue)}). "
            f"There is no evidence that {T} is endogenous; OLS and IV should agree."
        )
    weak = [c for c in report.failed_checks if c.name.startswith("First-stage")]
    caveat = (
        "The instrument is weak, so the IV estimate itself is unreliable."
        if weak else
        "The instrument is strong enough for the IV estimate to be trusted."
    )
    return "\n\n".join([_SEP, "ENDOGENEITY\n" + verdict, caveat, _SEP])
