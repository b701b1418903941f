"""
Module: errors.py
Description: Exceptions raised by the analysis stages when the data cannot
             support the requested computation.
"""


class AnalysisError(Exception):
    pass


class SchemaError(AnalysisError):
    """The table has no usable numeric data (too few rows or numeric columns)."""


class MissingValueError(SchemaError):
    pass


class DegenerateColumnError(AnalysisError):
    """A zero-variance column blocks standardization."""

    def __init__(self, columns):
        self.columns = list(columns)
        super().__init__(
            "Cannot standardize zero-variance column(s): " + ", ".join(map(str, self.columns))
        )


class InvalidKError(AnalysisError):
    pass


class SingularScatterError(AnalysisError):
    pass
