"""
Shared fixtures for the water-quality analysis tests.
"""

import os

import matplotlib
matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

SAMPLE_CSV = os.path.abspath(
    os.path.join(os.path.dirname(__file__), '..', 'data', 'water_quality_sample.csv')
)


@pytest.fixture
def sample_csv():
    """Path to the bundled 12-site example dataset."""
    return SAMPLE_CSV


@pytest.fixture
def three_cluster_df():
    """9 samples x 4 features, three groups of 3 whose centres are 15 units apart."""
    rng = np.random.default_rng(7)
    centres = np.repeat([0.0, 15.0, 30.0], 3)[:, np.newaxis]
    values = centres + rng.normal(0, 1, size=(9, 4))
    return pd.DataFrame(values, columns=['pH', 'nitrate', 'phosphate', 'turbidity'],
                        index=[f'S{i + 1}' for i in range(9)])


@pytest.fixture
def gaussian_blobs():
    """Three well separated Gaussian blobs of 20 samples with their group labels."""
    rng = np.random.default_rng(42)
    centres = np.array([
        [0.0, 0.0, 0.0, 0.0],
        [10.0, 10.0, 0.0, 0.0],
        [0.0, 10.0, 10.0, 0.0],
    ])
    values = np.vstack([centre + rng.normal(0, 1, size=(20, 4)) for centre in centres])
    df = pd.DataFrame(values, columns=['f1', 'f2', 'f3', 'f4'])
    labels = pd.Series(np.repeat([1, 2, 3], 20), index=df.index, name='cluster')
    return df, labels


@pytest.fixture
def raw_table():
    """Mixed table with identifier, date and numeric columns."""
    return pd.DataFrame({
        'site_id': ['A', 'B', 'C', 'D'],
        'sampling_date': ['2023-01-01', '2023-01-02', '2023-01-03', '2023-01-04'],
        'pH': [7.1, 6.8, 7.4, 7.0],
        'nitrate': [1, 4, 2, 3],
        'flagged': [True, False, False, True],
    })
