from __future__ import annotations

from dataclasses import dataclass

RESIDUAL_TEST = "Residual regression"
CONTROL_FUNCTION_TEST = "Control function (Durbin-Wu-Hausman)"
FIRST_STAGE_TEST = "First-stage F-statistic"


@dataclass(frozen=True)
class Assumption:
    """
    Something the price elasticity from IV is only valid under.

    ``checked_by`` names the ``EndogeneityReport`` check that looks at it in
    the cigarette data. Assumptions without one (exclusion, exogeneity of
    the tax) have to be defended with knowledge of how taxes are set.
    """

    name: str
    testable: bool
    checked_by: str | None = None

    def fmt_tag(self) -> str:
        """``[in data]`` or ``[argued]``, padded to the same width."""
        return "[in data]" if self.testable else "[argued] "


IV_ASSUMPTIONS: list[Assumption] = [
    Assumption("Relevance: the sales tax moves the real price", testable=True, checked_by=FIRST_STAGE_TEST),
    Assumption("Endogeneity: price is correlated with the demand error", testable=True, checked_by=RESIDUAL_TEST),
    Assumption("Exclusion restriction: the sales tax affects demand only through price", testable=False),
    Assumption("Exogeneity: the sales tax is unrelated to unobserved demand shifters", testable=False),
]


class RefutationCheck:
    """
    One regression test run against the demand equation.

    ``passed`` means the test speaks for reporting the IV elasticity:
    price looks endogenous, or the tax is a strong enough instrument.
    ``statistic`` is the coefficient, t or F value the verdict rests on.
    """

    def __init__(
        self,
        name: str,
        passed: bool,
        detail: str,
        statistic: float | None = None,
        pvalue: float | None = None,
    ) -> None:
        self.name = name
        self.passed = passed
        self.detail = detail
        self.statistic = statistic
        self.pvalue = pvalue

    def __repr__(self) -> str:
        status = "PASS" if self.passed else "FAIL"
        return f"RefutationCheck({status!r}, {self.name!r})"


class RefutationReport:
    """
    Checks run on one demand specification, looked up by name with
    ``check()``. Subclasses add ``_header_lines()`` naming the variables.
    """

    def __init__(self, checks: list[RefutationCheck], treatment: str, outcome: str) -> None:
        self._checks = checks
        self._treatment = treatment
        self._outcome = outcome

    def _header_lines(self) -> list[str]:
        raise NotImplementedError

    @property
    def checks(self) -> list[RefutationCheck]:
        return list(self._checks)

    @property
    def passed(self) -> bool:
        return all(c.passed for c in self._checks)

    @property
    def failed_checks(self) -> list[RefutationCheck]:
        return [c for c in self._checks if not c.passed]

    def check(self, name: str) -> RefutationCheck:
        for c in self._checks:
            if c.name == name:
                return c
        raise KeyError(f"No check named {name!r}. Checks run: {[c.name for c in self._checks]}")

    def summary(self) -> str:
        """One line per check with its statistic and p-value, then whether the IV estimate is supported."""
        lines = ["", *self._header_lines(), "─" * 50]
        for check in self._checks:
            status = "PASS" if check.passed else "FAIL"
            stats = []
            if check.statistic is not None:
                stats.append(f"stat {check.statistic:>9.4f}")
            if check.pvalue is not None:
                stats.append(f"p {check.pvalue:.4f}")
            suffix = f"  ({', '.join(stats)})" if stats else ""
            lines.append(f"  [{status}]  {check.name}{suffix}")
            lines.append(f"          {check.detail}")
        lines.append("")
        failed = self.failed_checks
        if not failed:
            lines.append(f"  All {len(self._checks)} checks support the IV estimate.")
        else:
            names = ", ".join(c.name for c in failed)
            lines.append(f"  {len(failed)} of {len(self._checks)} checks do not support the IV estimate: {names}.")
        lines.append("")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return self.summary()
