"""SQLTemplate: parameterized SQL execution with row mapping and cleanup."""

from .__version__ import __version__
from .errors import DataAccessError, NoDataFoundError, TooManyResultsError
from .mapping import RowMapper, as_dict, as_tuple, column_names, into, single_column
from .template import QueryExecutor, all_rows, single_row

__all__ = [
    "__version__",
    "DataAccessError",
    "NoDataFoundError",
    "QueryExecutor",
    "RowMapper",
    "TooManyResultsError",
    "all_rows",
    "as_dict",
    "as_tuple",
    "column_names",
    "into",
    "single_row",
    "single_column",
]
