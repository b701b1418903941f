"""
End-to-end tests for the analysis driver, the printed report, figures and
the command line.
"""

import os

import pytest

from errors import InvalidKError
from clustering import PCAResult, ClusterResult
from discriminant import DiscriminantResult
from report import print_report, write_latex_tables
from water_quality_analysis import run_analysis, render_figures, main

@pytest.fixture
def results(sample_csv):
    return run_analysis(sample_csv, n_clusters=3)

def _groups(labels):
    return sorted((frozenset(members.index) for _, members in labels.groupby(labels)), key=min)

class TestRunAnalysis:
    """Tests for the structured results of a full run."""

    def test_structured_results(self, results):
        assert isinstance(results['clusters'], ClusterResult)
        assert isinstance(results['pca'], PCAResult)
        assert isinstance(results['discriminant'], DiscriminantResult)
        assert list(results['numeric'].columns) == [
            'pH', 'dissolved_oxygen', 'BOD', 'COD', 'nitrate', 'phosphate', 'turbidity'
        ]
        assert results['standardized'].shape == (12, 7)

    def test_sites_grouped_by_pollution_level(self, results):
        """Clean, agricultural and industrial sites form the three clusters."""
        assert _groups(results['clusters'].labels) == [
            frozenset({0, 1, 2, 3}), frozenset({4, 5, 6, 7}), frozenset({8, 9, 10, 11})
        ]
        assert results['profiles']['size'].tolist() == [4, 4, 4]
        assert results['silhouette']['silhouette'].idxmax() == 3

    def test_sample_names_from_identifier_column(self, results):
        """Samples are named by the site_id column, aligned on the numeric rows."""
        names = results['sample_names']

        assert list(names.index) == list(results['numeric'].index)
        assert names.iloc[0] == 'S01'
        assert names.iloc[-1] == 'S12'

    def test_discriminant_reclassifies_clusters(self, results):
        table = results['reclassified']

        assert table.values.trace() == 12
        assert 0.0 <= results['cv_accuracy'] <= 1.0

    def test_invalid_k_propagates(self, sample_csv):
        with pytest.raises(InvalidKError):
            run_analysis(sample_csv, n_clusters=12)

class TestReport:
    """Tests for printed and LaTeX output."""

    def test_print_report(self, results, capsys):
        print_report(results)
        out = capsys.readouterr().out

        assert "Hierarchical clustering (Ward, k = 3)" in out
        assert "Principal component analysis" in out
        assert "Standardized discriminant function coefficients" in out
        assert "Correctly reclassified: 100.0%" in out

    def test_clusters_listed_by_site_id(self, results, capsys):
        print_report(results)
        out = capsys.readouterr().out

        assert "(4 samples): S01, S02, S03, S04" in out
        assert "(4 samples): 0, 1, 2, 3" not in out

    def test_latex_tables(self, results, tmp_path):
        written = write_latex_tables(results, str(tmp_path))

        assert len(written) == 6
        for path in written:
            assert os.path.exists(path)
        with open(tmp_path / "pca_variance.tex") as f:
            assert "\\begin{tabular}" in f.read()

class TestFigures:
    """Tests for saving figures."""

    def test_render_figures(self, results, tmp_path, capsys):
        render_figures(results, str(tmp_path))

        expected = {
            "correlation_matrix.png", "dendrogram.png", "scree.png",
            "pca_scores.png", "pca_loadings.png", "discriminant_scores.png",
        }
        assert expected <= set(os.listdir(tmp_path))
        assert "Figure written to" in capsys.readouterr().out

    def test_dendrogram_leaves_named_by_site_id(self, results, tmp_path, monkeypatch):
        import visualisation

        seen = {}
        original = visualisation.plot_dendrogram

        def recording_plot(cluster_result, sample_names=None, output_folder=None):
            seen['names'] = list(sample_names)
            return original(cluster_result, sample_names, output_folder)

        monkeypatch.setattr(visualisation, 'plot_dendrogram', recording_plot)
        render_figures(results, str(tmp_path))

        assert seen['names'][:3] == ['S01', 'S02', 'S03']

class TestCommandLine:
    """Tests for the command-line entry point."""

    def test_success(self, sample_csv, capsys):
        assert main([sample_csv, '--no-plots']) == 0
        assert "Linear discriminant analysis" in capsys.readouterr().out

    def test_single_column_file(self, tmp_path, capsys):
        path = tmp_path / "single.csv"
        path.write_text("pH\n6.0\n6.2\n6.1\n8.0\n8.3\n8.1\n")

        assert main([str(path), '-k', '2', '--no-plots']) == 0
        assert "1 numeric features: pH" in capsys.readouterr().out

    def test_invalid_k_reports_error(self, sample_csv, capsys):
        assert main([sample_csv, '-k', '1', '--no-plots']) == 1
        assert "Error:" in capsys.readouterr().err

    def test_constant_column_reports_error(self, tmp_path, capsys):
        path = tmp_path / "flat.csv"
        path.write_text("site,pH,BOD\nA,7.0,1.0\nB,7.0,2.0\nC,7.0,3.0\nD,7.0,4.0\n")

        assert main([str(path), '--no-plots']) == 1
        assert "pH" in capsys.readouterr().err

    def test_latex_and_figures_to_output(self, sample_csv, tmp_path):
        assert main([sample_csv, '--latex', '--output', str(tmp_path)]) == 0

        written = set(os.listdir(tmp_path))
        assert "lda_coefficients.tex" in written
        assert "dendrogram.png" in written
