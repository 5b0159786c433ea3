import pytest

from cigdemand import tutorial
from cigdemand.datasets import cigarettes_sw

from helpers import make_panel


def raw_panel(**kwargs):
    """The synthetic panel as loaded, before any derived columns."""
    return make_panel(**kwargs)[cigarettes_sw.COLUMNS].copy()


def run_quietly(data, **kwargs):
    lines = []
    results = tutorial.run(data=data, out=lines.append, **kwargs)
    return results, "\n".join(lines)


class TestTutorialRun:
    def test_sections_in_order(self):
        _, text = run_quietly(raw_panel())
        positions = [
            text.index("1. Get data"),
            text.index("2. Calculate variables"),
            text.index("3. Analysis using the IV model"),
            text.index("4. Test if the treatment is endogenous"),
        ]
        assert positions == sorted(positions)

    def test_derives_variables_on_the_passed_table(self):
        data = raw_panel()
        results, _ = run_quietly(data)
        assert results.data is data
        assert {"rprice", "salestax"} <= set(data.columns)

    def test_estimates_on_requested_year_only(self):
        results, _ = run_quietly(raw_panel(), year=1985)
        assert set(results.subset["year"]) == {1985}
        assert results.iv.nobs == len(results.subset)

    def test_manual_and_iv_agree(self):
        results, _ = run_quietly(raw_panel())
        assert results.manual.effect == pytest.approx(results.iv.effect, abs=1e-6)

    def test_controls_keep_row_count_and_introduce_no_missing_values(self):
        results, _ = run_quietly(raw_panel())
        assert results.iv_controls.nobs == results.iv.nobs
        assert results.iv_controls.controls == ["population", "income"]
        assert results.iv_controls.effect != results.iv.effect
        assert not results.subset.isna().any().any()

    def test_fitted_values_and_residuals_appended_to_subset(self):
        results, _ = run_quietly(raw_panel())
        assert "log_rprice_hat" in results.subset.columns
        assert "vhat" in results.subset.columns

    def test_prints_summary_statistics_and_interpretation(self):
        _, text = run_quietly(raw_panel())
        assert "St. Dev." in text
        assert "Correlation between salestax and price" in text
        assert "1% increase in rprice" in text
        assert "Endogeneity Report" in text

    def test_loads_dataset_when_not_given(self, monkeypatch):
        calls = []

        def fake_load():
            calls.append(True)
            return raw_panel()

        monkeypatch.setattr(cigarettes_sw, "load", fake_load)
        run_quietly(None)
        assert calls == [True]


class TestBundledDataset:
    def test_runs_without_network_on_the_shipped_panel(self):
        results = tutorial.run(out=lambda s: None)
        assert len(results.data) == 96
        assert len(results.subset) == 48
        assert results.iv.effect == pytest.approx(-1.08, abs=0.01)

    def test_python_m_entry_point_prints_every_section(self, capsys):
        import runpy

        runpy.run_module("cigdemand", run_name="__main__")
        text = capsys.readouterr().out
        for title in ("1. Get data", "2. Calculate variables", "3. Analysis using the IV model",
                      "4. Test if the treatment is endogenous"):
            assert title in text
