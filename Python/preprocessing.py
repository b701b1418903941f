"""
Module: preprocessing.py
Description: Contains functions to read the water-quality table, keep its
             numeric measurement columns, standardize them (z-scores) and
             compute descriptive statistics for the report.
"""

import csv
from itertools import islice

import numpy as np
import pandas as pd
from scipy.stats import shapiro, normaltest

from errors import SchemaError, MissingValueError, DegenerateColumnError

MISSING_MARKERS = ['', 'NA', 'N/A', 'n/a', 'na', '-']
CANDIDATE_SEPARATORS = ',;\t|'


#######################################################
# Loading
#######################################################

def sniff_separator(path, n_lines=5):
    with open(path, newline='') as f:
        sample = ''.join(islice(f, n_lines))
    try:
        return csv.Sniffer().sniff(sample, delimiters=CANDIDATE_SEPARATORS).delimiter
    except csv.Error:
        # a single column has no separator to find
        return ','


def load_data(path, sep=None):
    if sep is None:
        sep = sniff_separator(path)
    df = pd.read_csv(path, sep=sep, na_values=MISSING_MARKERS)
    df.columns = [str(c).strip() for c in df.columns]

    if len(df) < 2:
        raise SchemaError(f"Dataset '{path}' has {len(df)} row(s); at least 2 samples are required.")

    print(f"Loaded {len(df)} samples with {df.shape[1]} columns from: {path}")
    return df


#######################################################
# Cleaning
#######################################################

def _is_numeric_column(series):
    return (pd.api.types.is_numeric_dtype(series)
            and not pd.api.types.is_bool_dtype(series))


def select_numeric_columns(df, drop_missing=False):
    numeric_cols = [col for col in df.columns if _is_numeric_column(df[col])]
    dropped_cols = [col for col in df.columns if col not in numeric_cols]

    if not numeric_cols:
        raise SchemaError("No numeric columns found; nothing to analyse.")
    if dropped_cols:
        print(f"Dropped non-numeric column(s): {', '.join(map(str, dropped_cols))}")

    numeric = df[numeric_cols].astype(float)

    missing_rows = numeric.isnull().any(axis=1)
    if missing_rows.any():
        missing_cols = numeric.columns[numeric.isnull().any()].tolist()
        if not drop_missing:
            raise MissingValueError(
                f"{int(missing_rows.sum())} row(s) have missing values in column(s): "
                f"{', '.join(map(str, missing_cols))}"
            )
        numeric = numeric[~missing_rows]
        print(f"Dropped {int(missing_rows.sum())} row(s) with missing values "
              f"in: {', '.join(map(str, missing_cols))}")
        if len(numeric) < 2:
            raise SchemaError(f"Only {len(numeric)} complete row(s) remain; at least 2 samples are required.")

    return numeric


def sample_names(df):
    """Identifiers from the first text column, or the row index when there is none."""
    for col in df.columns:
        if pd.api.types.is_object_dtype(df[col]) or pd.api.types.is_string_dtype(df[col]):
            return df[col].astype(str).rename('sample')
    return pd.Series(df.index.astype(str), index=df.index, name='sample')


#######################################################
# Standardizing
#######################################################

def standardize_data(numeric_df):
    means = numeric_df.mean()
    std_devs = numeric_df.std(ddof=1)

    degenerate = [col for col in numeric_df.columns
                  if numeric_df[col].nunique() <= 1 or std_devs[col] == 0]
    if degenerate:
        raise DegenerateColumnError(degenerate)

    standardized = (numeric_df - means) / std_devs
    scaling = pd.DataFrame({'mean': means, 'std': std_devs})
    return standardized, scaling


def destandardize_data(standardized_df, scaling):
    return standardized_df * scaling['std'] + scaling['mean']


#######################################################
# Summary Statistics
#######################################################

def normality_p_value(x):
    data = np.asarray(x.dropna(), dtype=float)
    # shapiro needs at least three values
    try:
        if 3 <= len(data) <= 5000:
            return shapiro(data)[1]
        if len(data) > 5000:
            return normaltest(data)[1]
    except ValueError:
        pass
    return np.nan


def generate_summary_statistics(numeric_df):
    def kurtosis_custom(x):
        return x.kurtosis()

    def skewness_custom(x):
        return x.skew()

    def percentile_5(x):
        return x.quantile(0.05)

    def percentile_95(x):
        return x.quantile(0.95)

    summary_statistics = numeric_df.agg([
        'min', 'max', 'std', 'median', 'mean', 'var',
        kurtosis_custom, skewness_custom,
        percentile_5, percentile_95, normality_p_value
    ])
    summary_statistics = summary_statistics.T
    summary_statistics.columns = [
        'min', 'max', 'std', 'median', 'mean', 'var',
        'kurtosis', 'skewness', 'p5', 'p95', 'normality_p'
    ]
    return summary_statistics
