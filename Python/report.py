"""
Module: report.py
Description: Prints the narrative summary of an analysis run and writes its
             tables (summary statistics, PCA, discriminant functions) as LaTeX.
             Works only on the structured results returned by run_analysis.
"""

import os

from tabulate import tabulate

from clustering import kaiser_components


def _table(df, floatfmt=".3f", showindex=True):
    return tabulate(df, headers='keys', tablefmt='github', floatfmt=floatfmt, showindex=showindex)


def _section(title):
    print()
    print(title)
    print("=" * len(title))


def print_report(results):
    numeric = results['numeric']
    clusters = results['clusters']
    pca = results['pca']
    discriminant = results['discriminant']
    names = results.get('sample_names')

    _section("Data")
    print(f"{numeric.shape[0]} samples, {numeric.shape[1]} numeric features: "
          f"{', '.join(map(str, numeric.columns))}")
    print(_table(results['summary'][['mean', 'std', 'min', 'max', 'skewness', 'normality_p']]))

    _section(f"Hierarchical clustering (Ward, k = {clusters.n_clusters})")
    print(f"Cophenetic correlation: {clusters.cophenetic_correlation:.3f}")
    for label, members in clusters.labels.groupby(clusters.labels):
        ids = names.loc[members.index] if names is not None else members.index
        print(f"Cluster {label} ({len(members)} samples): {', '.join(map(str, ids))}")
    print()
    print("Cluster means (original units):")
    print(_table(results['profiles']))
    if results.get('silhouette') is not None:
        silhouette = results['silhouette']['silhouette']
        print()
        print("Silhouette score by number of clusters:")
        print(_table(results['silhouette']))
        print(f"Best separated cut: k = {silhouette.idxmax()} ({silhouette.max():.3f})")

    _section("Principal component analysis")
    print(_table(pca.variance))
    kaiser = kaiser_components(pca)
    print(f"Components with eigenvalue > 1: {', '.join(kaiser) if kaiser else 'none'}")
    leading = pca.variance.index[:min(3, len(pca.variance))]
    print()
    print("Loadings:")
    print(_table(pca.loadings[leading]))
    for component in leading:
        top = pca.loadings[component].abs().idxmax()
        print(f"{component} is dominated by '{top}' "
              f"(loading {pca.loadings.loc[top, component]:+.3f}).")

    _section("Linear discriminant analysis")
    print(_table(discriminant.eigenvalues))
    print()
    print("Standardized discriminant function coefficients:")
    print(_table(discriminant.coefficients))
    print()
    print("Reclassification by nearest group centroid:")
    print(_table(results['reclassified']))
    table = results['reclassified']
    hits = sum(table.loc[g, g] for g in table.index if g in table.columns) / table.values.sum()
    print(f"Correctly reclassified: {hits:.1%}")
    if results.get('cv_accuracy') is not None:
        print(f"Leave-one-out accuracy: {results['cv_accuracy']:.1%}")


#######################################################
# LaTeX Tables
#######################################################

def write_latex_table(df, filename, output_folder, showindex=True):
    if not os.path.exists(output_folder):
        os.makedirs(output_folder)
    output_file = os.path.join(output_folder, filename)
    latex_table = tabulate(df, headers='keys', tablefmt='latex', showindex=showindex, floatfmt=".3f")
    with open(output_file, "w") as f:
        f.write(latex_table)
    print(f"LaTeX table written to: {output_file}")
    return output_file


def write_latex_tables(results, output_folder):
    return [
        write_latex_table(results['summary'].round(3), "summary_stats.tex", output_folder),
        write_latex_table(results['profiles'].round(3), "cluster_profiles.tex", output_folder),
        write_latex_table(results['pca'].variance, "pca_variance.tex", output_folder),
        write_latex_table(results['pca'].loadings, "pca_loadings.tex", output_folder),
        write_latex_table(results['discriminant'].eigenvalues, "lda_eigenvalues.tex", output_folder),
        write_latex_table(results['discriminant'].coefficients, "lda_coefficients.tex", output_folder),
    ]
