"""
Module: clustering.py
Description: Contains functions to perform Ward hierarchical clustering, PCA,
             and evaluation of clustering quality on standardized data.
"""

from collections import namedtuple

import numpy as np
import pandas as pd
from scipy.spatial.distance import pdist, squareform
from scipy.cluster.hierarchy import cophenet
from sklearn.decomposition import PCA
from sklearn.metrics import silhouette_score

from errors import InvalidKError

DEFAULT_N_CLUSTERS = 3
DISTANCE_METRIC = 'euclidean'
ZERO_VARIANCE_TOLERANCE = 1e-10

ClusterResult = namedtuple(
    'ClusterResult',
    ['distances', 'linkage', 'labels', 'n_clusters', 'cophenetic_correlation']
)
PCAResult = namedtuple('PCAResult', ['variance', 'loadings', 'scores', 'mean'])


################################
# Hierarchical Clustering
################################

def validate_n_clusters(n_clusters, n_samples):
    if isinstance(n_clusters, bool) or not isinstance(n_clusters, (int, np.integer)):
        raise InvalidKError(f"Number of clusters must be an integer, got {n_clusters!r}.")
    if n_clusters < 2 or n_clusters > n_samples - 1:
        raise InvalidKError(
            f"Number of clusters must be between 2 and {n_samples - 1} "
            f"for {n_samples} samples, got {n_clusters}."
        )


def compute_distance_matrix(std_df):
    distances = squareform(pdist(std_df.values, metric=DISTANCE_METRIC))
    return pd.DataFrame(distances, index=std_df.index, columns=std_df.index)


def _ward_update(d_ik, d_jk, d_ij, size_i, size_j, size_k):
    # Lance-Williams recurrence for Ward's criterion on Euclidean distances
    total = size_i + size_j + size_k
    squared = ((size_i + size_k) * d_ik ** 2 + (size_j + size_k) * d_jk ** 2
               - size_k * d_ij ** 2) / total
    return np.sqrt(np.maximum(squared, 0.0))


def build_dendrogram(std_df):
    """
    Ward agglomeration over the full distance matrix, returned in scipy's
    linkage format (left id, right id, height, size).

    Among merges of equal height the pair with the lowest id sum wins, then
    the pair with the lowest first id. Leaves are numbered 0..n-1 and the
    cluster formed at step s is numbered n + s.
    """
    n_samples = len(std_df)
    dist = squareform(pdist(std_df.values, metric=DISTANCE_METRIC))
    sizes = np.ones(n_samples)
    node_ids = np.arange(n_samples)
    active = list(range(n_samples))
    Z = np.zeros((n_samples - 1, 4))

    for step in range(n_samples - 1):
        pairs = [(a, b) for pos, a in enumerate(active) for b in active[pos + 1:]]
        heights = np.array([dist[a, b] for a, b in pairs])
        best = heights.min()
        tied = np.flatnonzero(np.isclose(heights, best, rtol=1e-12, atol=1e-12))
        a, b = min(
            (pairs[t] for t in tied),
            key=lambda pair: (node_ids[pair[0]] + node_ids[pair[1]],
                              min(node_ids[pair[0]], node_ids[pair[1]]))
        )

        left, right = sorted((node_ids[a], node_ids[b]))
        Z[step] = [left, right, dist[a, b], sizes[a] + sizes[b]]

        for k in active:
            if k in (a, b):
                continue
            dist[a, k] = dist[k, a] = _ward_update(
                dist[a, k], dist[b, k], dist[a, b], sizes[a], sizes[b], sizes[k])
        sizes[a] += sizes[b]
        node_ids[a] = n_samples + step
        active.remove(b)

    return Z


def cut_dendrogram(linkage_matrix, n_clusters):
    """
    Apply the first n - k merges of the linkage matrix and label the k
    resulting clusters 1..k in the order they first take part in a merge.
    Clusters that are still single samples come last, in sample order.
    """
    n_samples = linkage_matrix.shape[0] + 1
    validate_n_clusters(n_clusters, n_samples)

    members = {i: [i] for i in range(n_samples)}
    first_merge = {i: np.inf for i in range(n_samples)}

    # scipy numbers the cluster formed at row i as n_samples + i
    for step in range(n_samples - n_clusters):
        left, right = int(linkage_matrix[step, 0]), int(linkage_matrix[step, 1])
        node = n_samples + step
        members[node] = members.pop(left) + members.pop(right)
        first_merge[node] = min(first_merge.pop(left), first_merge.pop(right), step)

    ordered = sorted(members, key=lambda node: (first_merge[node], min(members[node])))

    labels = np.zeros(n_samples, dtype=int)
    for label, node in enumerate(ordered, start=1):
        labels[members[node]] = label
    return labels


def hierarchical_clustering(std_df, n_clusters=DEFAULT_N_CLUSTERS):
    validate_n_clusters(n_clusters, len(std_df))

    distances = compute_distance_matrix(std_df)
    linkage_matrix = build_dendrogram(std_df)
    labels = pd.Series(cut_dendrogram(linkage_matrix, n_clusters),
                       index=std_df.index, name='cluster')
    coph_corr, _ = cophenet(linkage_matrix, squareform(distances.values, checks=False))

    return ClusterResult(distances, linkage_matrix, labels, n_clusters, coph_corr)


def evaluate_cluster_counts(std_df, k_values=None, linkage_matrix=None):
    if linkage_matrix is None:
        linkage_matrix = build_dendrogram(std_df)
    n_samples = len(std_df)
    if k_values is None:
        k_values = range(2, min(n_samples - 1, 8) + 1)

    results = []
    for k in k_values:
        labels = cut_dendrogram(linkage_matrix, k)
        results.append({'k': k, 'silhouette': silhouette_score(std_df.values, labels)})
    return pd.DataFrame(results).set_index('k')


def cluster_profiles(numeric_df, labels):
    profiles = numeric_df.groupby(labels).mean()
    profiles.insert(0, 'size', labels.value_counts().sort_index())
    profiles.index.name = 'cluster'
    return profiles


################################
# Principal Component Analysis
################################

def run_pca(std_df):
    pca = PCA(svd_solver='full')
    pca.fit(std_df.values)

    components = pca.components_.copy()
    # largest-magnitude loading of each component is made non-negative
    pivots = np.abs(components).argmax(axis=1)
    signs = np.sign(components[np.arange(len(components)), pivots])
    signs[signs == 0] = 1
    components *= signs[:, np.newaxis]

    names = [f'PC{i + 1}' for i in range(len(components))]
    eigenvalues = pca.explained_variance_
    negligible = eigenvalues < ZERO_VARIANCE_TOLERANCE

    variance = pd.DataFrame({
        'eigenvalue': eigenvalues,
        'variance_ratio': pca.explained_variance_ratio_,
        'cumulative_ratio': np.cumsum(pca.explained_variance_ratio_),
        'negligible': negligible,
    }, index=names)
    loadings = pd.DataFrame(components.T, index=std_df.columns, columns=names)
    scores = pd.DataFrame((std_df.values - pca.mean_) @ components.T,
                          index=std_df.index, columns=names)

    if negligible.any():
        flagged = [name for name, flag in zip(names, negligible) if flag]
        print(f"Warning: component(s) {', '.join(flagged)} carry no variance "
              f"(eigenvalue < {ZERO_VARIANCE_TOLERANCE:g}).")

    return PCAResult(variance, loadings, scores, pd.Series(pca.mean_, index=std_df.columns))


def reconstruct_from_pca(pca_result, n_components=None):
    loadings = pca_result.loadings
    scores = pca_result.scores
    if n_components is not None:
        loadings = loadings.iloc[:, :n_components]
        scores = scores.iloc[:, :n_components]
    reconstructed = scores.values @ loadings.values.T + pca_result.mean.values
    return pd.DataFrame(reconstructed, index=scores.index, columns=loadings.index)


def kaiser_components(pca_result):
    return pca_result.variance.index[pca_result.variance['eigenvalue'] > 1].tolist()
