"""
Module: water_quality_analysis.py
Description: Runs the full exploratory analysis of a water-quality table:
             cleaning, standardization, Ward clustering, PCA and discriminant
             analysis on the cluster groups, followed by the printed report,
             figures and optional LaTeX tables.
"""

import argparse
import os
import sys

from errors import AnalysisError
from preprocessing import (
    load_data, select_numeric_columns, sample_names, standardize_data, generate_summary_statistics
)
from clustering import (
    DEFAULT_N_CLUSTERS, hierarchical_clustering, evaluate_cluster_counts, cluster_profiles, run_pca
)
from discriminant import fit_discriminant, confusion_table, cross_validate_discriminant
from report import print_report, write_latex_tables


def run_analysis(path, n_clusters=DEFAULT_N_CLUSTERS, drop_missing=False, sep=None):
    data = load_data(path, sep=sep)
    numeric = select_numeric_columns(data, drop_missing=drop_missing)
    standardized, scaling = standardize_data(numeric)

    clusters = hierarchical_clustering(standardized, n_clusters)
    pca = run_pca(standardized)
    discriminant = fit_discriminant(standardized, clusters.labels)

    return {
        'data': data,
        'numeric': numeric,
        'sample_names': sample_names(data).loc[numeric.index],
        'standardized': standardized,
        'scaling': scaling,
        'summary': generate_summary_statistics(numeric),
        'clusters': clusters,
        'profiles': cluster_profiles(numeric, clusters.labels),
        'silhouette': evaluate_cluster_counts(standardized, linkage_matrix=clusters.linkage),
        'pca': pca,
        'discriminant': discriminant,
        'reclassified': confusion_table(discriminant),
        'cv_accuracy': cross_validate_discriminant(standardized, clusters.labels),
    }


def render_figures(results, output_folder=None):
    # imported here so the numeric pipeline runs without a plotting backend
    import visualisation

    visualisation.plot_correlation_matrix(results['numeric'], output_folder)
    visualisation.plot_dendrogram(results['clusters'], sample_names=results.get('sample_names'),
                                  output_folder=output_folder)
    visualisation.plot_scree(results['pca'], output_folder)
    visualisation.plot_pca_scores(results['pca'], results['clusters'].labels, output_folder)
    visualisation.plot_pca_loadings(results['pca'], output_folder)
    visualisation.plot_discriminant_scores(results['discriminant'], output_folder)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description='Cluster, PCA and discriminant analysis of a water-quality dataset'
    )
    parser.add_argument('data', help='Delimited file with a header row')
    parser.add_argument(
        '-k', '--clusters',
        type=int,
        default=DEFAULT_N_CLUSTERS,
        help='Number of clusters to cut the dendrogram into'
    )
    parser.add_argument('--sep', help='Column separator (sniffed when omitted)')
    parser.add_argument(
        '--drop-missing',
        action='store_true',
        help='Drop rows with missing measurements instead of failing'
    )
    parser.add_argument('--output', help='Folder for figures and tables (figures are shown when omitted)')
    parser.add_argument('--latex', action='store_true', help='Write LaTeX tables to the output folder')
    parser.add_argument('--no-plots', action='store_true', help='Skip the figures')
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    try:
        results = run_analysis(args.data, n_clusters=args.clusters,
                               drop_missing=args.drop_missing, sep=args.sep)
    except AnalysisError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print_report(results)

    if args.latex:
        output_folder = args.output or os.path.abspath(
            os.path.join(os.path.dirname(__file__), "..", "Output"))
        write_latex_tables(results, output_folder)
    if not args.no_plots:
        render_figures(results, args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
