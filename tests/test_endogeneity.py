import pytest

from cigdemand import (
    EndogeneityTest,
    IVRegression,
    VariableError,
    control_function_test,
    first_stage_strength,
    residual_test,
)
from cigdemand.refutations._check import IV_ASSUMPTIONS, RefutationCheck
from cigdemand.refutations.endogeneity import (
    CONTROL_FUNCTION_TEST,
    FIRST_STAGE_TEST,
    RESIDUAL_TEST,
    EndogeneityReport,
)

from helpers import make_panel


CONTROLS = ["population", "income"]


class TestResidualRegression:
    def test_endogenous_price_is_detected(self):
        report = EndogeneityTest(controls=CONTROLS).run(make_panel())
        assert report.endogenous
        assert report.residual_pvalue < 0.05

    def test_residual_coefficient_is_one(self):
        """OLS residuals are orthogonal to the fitted part, so y on vhat has slope 1."""
        report = EndogeneityTest(controls=CONTROLS).run(make_panel())
        assert report.residual_coefficient == pytest.approx(1.0)

    def test_residuals_align_with_input(self):
        df = make_panel()
        report = EndogeneityTest().run(df)
        resid = report.residuals
        assert resid.name == "vhat"
        assert resid.index.equals(df.index)
        assert resid.mean() == pytest.approx(0.0, abs=1e-10)


class TestControlFunction:
    def test_rejects_exogeneity_when_price_is_confounded(self):
        report = EndogeneityTest(controls=CONTROLS).run(make_panel())
        assert report.check(CONTROL_FUNCTION_TEST).passed

    def test_does_not_reject_when_price_is_exogenous(self):
        report = EndogeneityTest().run(make_panel(confounding=0.0))
        assert report.check(CONTROL_FUNCTION_TEST).pvalue > 0.001


class TestFirstStageStrength:
    def test_strong_instrument_passes(self):
        report = EndogeneityTest().run(make_panel())
        check = report.check(FIRST_STAGE_TEST)
        assert check.passed
        assert check.statistic > 10

    def test_irrelevant_instrument_fails(self):
        report = EndogeneityTest().run(make_panel(relevance=0.0))
        check = report.check(FIRST_STAGE_TEST)
        assert not check.passed
        assert check in report.failed_checks
        assert not report.passed
        assert "Weak instrument" in check.detail


class TestEndogeneityReport:
    def test_check_order(self):
        report = EndogeneityTest().run(make_panel())
        assert [c.name for c in report.checks] == [RESIDUAL_TEST, CONTROL_FUNCTION_TEST, FIRST_STAGE_TEST]
        assert all(isinstance(c, RefutationCheck) for c in report.checks)

    def test_unknown_check_raises(self):
        report = EndogeneityTest().run(make_panel())
        with pytest.raises(KeyError, match="No check named"):
            report.check("Placebo")

    def test_all_pass_on_confounded_data(self):
        report = EndogeneityTest(controls=CONTROLS).run(make_panel())
        assert report.passed
        assert report.failed_checks == []

    def test_summary(self):
        report = EndogeneityTest().run(make_panel())
        text = report.summary()
        assert "Endogeneity Report" in text
        assert "[PASS]" in text
        assert "All 3 checks support the IV estimate." in text
        assert "(stat" in text

    def test_summary_names_the_failing_check(self):
        report = EndogeneityTest().run(make_panel(relevance=0.0))
        text = report.summary()
        assert "[FAIL]  First-stage F-statistic" in text
        verdict = text.strip().splitlines()[-1]
        assert "do not support the IV estimate" in verdict
        assert FIRST_STAGE_TEST in verdict

    def test_executive_summary_reads_verdict(self):
        report = EndogeneityTest().run(make_panel())
        assert "correlated with the error term" in report.executive_summary()

    def test_refute_from_iv_result_uses_same_specification(self):
        df = make_panel()
        report = IVRegression(controls=CONTROLS).fit(df).refute(df)
        assert isinstance(report, EndogeneityReport)
        direct = EndogeneityTest(controls=CONTROLS).run(df)
        assert report.residual_pvalue == pytest.approx(direct.residual_pvalue)

    def test_invalid_alpha_raises(self):
        with pytest.raises(ValueError, match="alpha"):
            EndogeneityTest(alpha=1.5)

    def test_repr_is_summary(self):
        report = EndogeneityTest().run(make_panel())
        assert repr(report) == report.summary()


class TestDataLevelFunctions:
    def test_residual_test_matches_report(self):
        df = make_panel()
        check = residual_test(df, controls=CONTROLS)
        report = EndogeneityTest(controls=CONTROLS).run(df)
        assert check.name == RESIDUAL_TEST
        assert check.passed
        assert check.statistic == pytest.approx(report.residual_coefficient)
        assert check.pvalue == pytest.approx(report.residual_pvalue)

    def test_control_function_test_matches_report(self):
        df = make_panel()
        check = control_function_test(df, controls=CONTROLS)
        expected = EndogeneityTest(controls=CONTROLS).run(df).check(CONTROL_FUNCTION_TEST)
        assert check.passed
        assert check.statistic == pytest.approx(expected.statistic)

    def test_first_stage_strength_matches_report(self):
        df = make_panel()
        check = first_stage_strength(df)
        expected = EndogeneityTest().run(df).check(FIRST_STAGE_TEST)
        assert check.statistic == pytest.approx(expected.statistic)
        assert check.passed

    def test_first_stage_strength_threshold(self):
        check = first_stage_strength(make_panel(), threshold=1e9)
        assert not check.passed

    def test_input_is_not_modified(self):
        df = make_panel()
        before = list(df.columns)
        residual_test(df)
        control_function_test(df)
        first_stage_strength(df)
        assert list(df.columns) == before

    def test_missing_column_raises(self):
        with pytest.raises(VariableError, match="salestax"):
            first_stage_strength(make_panel().drop(columns=["salestax"]))

    def test_same_outcome_and_treatment_raises(self):
        with pytest.raises(ValueError, match="different variables"):
            residual_test(make_panel(), outcome="packs", treatment="packs")


class TestAssumptions:
    def test_testable_assumptions_name_a_check_that_is_run(self):
        report = EndogeneityTest().run(make_panel())
        for assumption in IV_ASSUMPTIONS:
            if assumption.testable:
                assert report.check(assumption.checked_by) is not None
            else:
                assert assumption.checked_by is None

    def test_interpretation_points_to_the_checks(self):
        text = IVRegression().fit(make_panel()).executive_summary()
        assert f"(see: {FIRST_STAGE_TEST})" in text
        assert "[argued]" in text
