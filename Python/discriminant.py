"""
Module: discriminant.py
Description: Contains functions to fit a linear discriminant analysis on the
             standardized data using the cluster assignment as group labels,
             project the samples onto the discriminant axes and check how well
             the groups are separated.
"""

from collections import namedtuple

import numpy as np
import pandas as pd
from scipy.linalg import eigh
from sklearn.discriminant_analysis import LinearDiscriminantAnalysis
from sklearn.model_selection import LeaveOneOut, cross_val_score

from errors import SingularScatterError

DiscriminantResult = namedtuple(
    'DiscriminantResult',
    ['coefficients', 'eigenvalues', 'scores', 'centroids', 'groups', 'center']
)


#######################################################
# Scatter Matrices
#######################################################

def scatter_matrices(X, groups):
    overall_mean = X.mean(axis=0)
    n_features = X.shape[1]
    between = np.zeros((n_features, n_features))
    within = np.zeros((n_features, n_features))

    for group in np.unique(groups):
        members = X[groups == group]
        group_mean = members.mean(axis=0)
        offset = (group_mean - overall_mean)[:, np.newaxis]
        between += len(members) * (offset @ offset.T)
        centered = members - group_mean
        within += centered.T @ centered

    return between, within


def _check_groups(groups, n_features):
    counts = pd.Series(groups).value_counts().sort_index()
    n_samples, n_groups = len(groups), len(counts)

    if n_groups < 2:
        raise SingularScatterError("Discriminant analysis needs at least two groups.")
    small = counts[counts < 2]
    if not small.empty:
        raise SingularScatterError(
            f"Group(s) {', '.join(map(str, small.index))} have fewer than 2 samples."
        )
    if n_samples <= n_features + n_groups:
        raise SingularScatterError(
            f"{n_samples} samples cannot support {n_features} features in {n_groups} groups "
            f"(need more than {n_features + n_groups})."
        )


#######################################################
# Fitting & Projection
#######################################################

def fit_discriminant(std_df, labels):
    X = std_df.values
    groups = labels.reindex(std_df.index).values
    n_samples, n_features = X.shape
    _check_groups(groups, n_features)

    n_groups = len(np.unique(groups))
    between, within = scatter_matrices(X, groups)
    if np.linalg.matrix_rank(within) < n_features:
        raise SingularScatterError(
            "Within-group scatter matrix is singular; the features are linearly "
            "dependent inside the groups."
        )

    try:
        eigenvalues, eigenvectors = eigh(between, within)
    except np.linalg.LinAlgError as exc:
        raise SingularScatterError(f"Within-group scatter matrix is not invertible: {exc}") from exc

    n_axes = min(n_groups - 1, n_features)
    order = np.argsort(eigenvalues)[::-1][:n_axes]
    eigenvalues = np.clip(eigenvalues[order], 0, None)
    # eigh scales v so that v' Sw v = 1; rescale to unit pooled within-group variance
    axes = eigenvectors[:, order] * np.sqrt(n_samples - n_groups)

    pivots = np.abs(axes).argmax(axis=0)
    signs = np.sign(axes[pivots, np.arange(n_axes)])
    signs[signs == 0] = 1
    axes *= signs

    names = [f'LD{i + 1}' for i in range(n_axes)]
    total = eigenvalues.sum()
    proportion = eigenvalues / total if total > 0 else np.full(n_axes, np.nan)

    center = X.mean(axis=0)
    scores = pd.DataFrame((X - center) @ axes, index=std_df.index, columns=names)
    group_series = pd.Series(groups, index=std_df.index, name=labels.name)

    return DiscriminantResult(
        coefficients=pd.DataFrame(axes, index=std_df.columns, columns=names),
        eigenvalues=pd.DataFrame({'eigenvalue': eigenvalues, 'proportion': proportion}, index=names),
        scores=scores,
        centroids=scores.groupby(group_series).mean(),
        groups=group_series,
        center=pd.Series(center, index=std_df.columns),
    )


def project_discriminant(result, std_df):
    projected = (std_df.values - result.center.values) @ result.coefficients.values
    return pd.DataFrame(projected, index=std_df.index, columns=result.coefficients.columns)


#######################################################
# Reclassification
#######################################################

def classify_nearest_centroid(result, scores=None):
    if scores is None:
        scores = result.scores
    centroids = result.centroids
    diffs = scores.values[:, np.newaxis, :] - centroids.values[np.newaxis, :, :]
    nearest = np.sqrt((diffs ** 2).sum(axis=2)).argmin(axis=1)
    return pd.Series(centroids.index.values[nearest], index=scores.index, name='predicted')


def confusion_table(result):
    predicted = classify_nearest_centroid(result)
    return pd.crosstab(result.groups, predicted, rownames=['group'], colnames=['predicted'])


def cross_validate_discriminant(std_df, labels):
    groups = labels.reindex(std_df.index).values
    _check_groups(groups, std_df.shape[1])
    model = LinearDiscriminantAnalysis(solver='svd')
    scores = cross_val_score(model, std_df.values, groups, cv=LeaveOneOut())
    return float(np.mean(scores))
