# visualisation.py
import os

import numpy as np
import matplotlib.pyplot as plt
import seaborn as sns
from scipy.cluster.hierarchy import dendrogram


def _finish(fig, filename, output_folder=None):
    plt.tight_layout()
    if output_folder is None:
        plt.show()
        return None
    if not os.path.exists(output_folder):
        os.makedirs(output_folder)
    output_file = os.path.join(output_folder, filename)
    fig.savefig(output_file, dpi=150)
    plt.close(fig)
    print(f"Figure written to: {output_file}")
    return output_file


def _group_palette(labels):
    groups = sorted(labels.unique())
    return dict(zip(groups, sns.color_palette("tab10", len(groups))))


################################
# Clustering
################################

def plot_dendrogram(cluster_result, sample_names=None, output_folder=None):
    Z = cluster_result.linkage
    k = cluster_result.n_clusters
    n_samples = Z.shape[0] + 1
    # any height between the last kept merge and the next one leaves k clusters
    threshold = (Z[n_samples - k - 1, 2] + Z[n_samples - k, 2]) / 2

    if sample_names is None:
        sample_names = cluster_result.labels.index
    fig, ax = plt.subplots(figsize=(max(8, n_samples * 0.25), 5))
    dendrogram(Z, labels=[str(s) for s in sample_names], color_threshold=threshold,
               leaf_rotation=90, leaf_font_size=7, ax=ax)
    ax.axhline(threshold, color='grey', linestyle='--', linewidth=0.8)
    ax.set_title(f"Ward Dendrogram (k = {k})")
    ax.set_ylabel("Merge height")
    return _finish(fig, "dendrogram.png", output_folder)


################################
# PCA
################################

def plot_scree(pca_result, output_folder=None):
    variance = pca_result.variance
    positions = np.arange(1, len(variance) + 1)

    fig, ax = plt.subplots(figsize=(8, 4))
    ax.bar(positions, variance['variance_ratio'] * 100, edgecolor='black', label='Explained')
    ax.plot(positions, variance['cumulative_ratio'] * 100, marker='o', color='darkred',
            label='Cumulative')
    ax.set_xticks(positions)
    ax.set_xticklabels(variance.index, fontsize=7)
    ax.set_ylabel("Variance explained (%)")
    ax.set_title("Scree Plot")
    ax.legend(fontsize=7)
    return _finish(fig, "scree.png", output_folder)


def plot_pca_scores(pca_result, labels=None, output_folder=None):
    scores = pca_result.scores
    if scores.shape[1] < 2:
        print("Skipping PCA score plot: fewer than two components.")
        return None
    ratios = pca_result.variance['variance_ratio']

    fig, ax = plt.subplots(figsize=(7, 6))
    if labels is None:
        ax.scatter(scores['PC1'], scores['PC2'], edgecolor='black')
    else:
        sns.scatterplot(x=scores['PC1'], y=scores['PC2'], hue=labels.reindex(scores.index),
                        palette=_group_palette(labels), edgecolor='black', ax=ax)
    for name, row in scores.iterrows():
        ax.annotate(str(name), (row['PC1'], row['PC2']), fontsize=6,
                    xytext=(3, 3), textcoords='offset points')
    ax.axhline(0, color='grey', linewidth=0.5)
    ax.axvline(0, color='grey', linewidth=0.5)
    ax.set_xlabel(f"PC1 ({ratios['PC1']:.1%})")
    ax.set_ylabel(f"PC2 ({ratios['PC2']:.1%})")
    ax.set_title("PCA Scores")
    return _finish(fig, "pca_scores.png", output_folder)


def plot_pca_loadings(pca_result, output_folder=None):
    loadings = pca_result.loadings
    if loadings.shape[1] < 2:
        print("Skipping PCA loading plot: fewer than two components.")
        return None

    fig, ax = plt.subplots(figsize=(7, 6))
    ax.add_patch(plt.Circle((0, 0), 1, fill=False, color='grey', linestyle='--'))
    for feature, row in loadings.iterrows():
        ax.arrow(0, 0, row['PC1'], row['PC2'], head_width=0.02, color='steelblue',
                 length_includes_head=True)
        ax.text(row['PC1'] * 1.08, row['PC2'] * 1.08, str(feature), fontsize=7,
                ha='center', va='center')
    ax.set_xlim(-1.1, 1.1)
    ax.set_ylim(-1.1, 1.1)
    ax.set_aspect('equal')
    ax.set_xlabel("PC1 loading")
    ax.set_ylabel("PC2 loading")
    ax.set_title("PCA Loadings")
    return _finish(fig, "pca_loadings.png", output_folder)


################################
# Discriminant Analysis
################################

def plot_discriminant_scores(discriminant_result, output_folder=None):
    scores = discriminant_result.scores
    groups = discriminant_result.groups
    palette = _group_palette(groups)

    fig, ax = plt.subplots(figsize=(7, 6))
    if scores.shape[1] == 1:
        sns.stripplot(x=scores['LD1'], y=groups.astype(str), hue=groups, palette=palette,
                      orient='h', ax=ax, legend=False)
        ax.set_xlabel("LD1")
        ax.set_ylabel("Group")
    else:
        sns.scatterplot(x=scores['LD1'], y=scores['LD2'], hue=groups, palette=palette,
                        edgecolor='black', ax=ax)
        centroids = discriminant_result.centroids
        ax.scatter(centroids['LD1'], centroids['LD2'], marker='X', s=150, color='black',
                   label='Centroid')
        proportion = discriminant_result.eigenvalues['proportion']
        ax.set_xlabel(f"LD1 ({proportion['LD1']:.1%})")
        ax.set_ylabel(f"LD2 ({proportion['LD2']:.1%})")
        ax.legend(fontsize=7)
    ax.set_title("Discriminant Scores")
    return _finish(fig, "discriminant_scores.png", output_folder)


#######################################################
# Correlation Matrix Plot
#######################################################

def plot_correlation_matrix(numeric_df, output_folder=None):
    fig = plt.figure(figsize=(10, 8))
    sns.heatmap(numeric_df.corr(), annot=True, cmap="Blues",
                fmt=".2f", center=0, annot_kws={"fontsize": 7})
    plt.title('Correlation Matrix of Features')
    plt.xticks(rotation=45, ha='right', fontsize=7)
    plt.yticks(fontsize=7)
    return _finish(fig, "correlation_matrix.png", output_folder)
