"""
Column selection and pandas helpers shared by the perceptual mapping nodes.
The column selection helpers follow the ones of Harvard's spatial data lab Geospatial Analytics Extension.
https://github.com/spatial-data-lab/knime-geospatial-extension/blob/main/knime_extension/src/util/knime_utils.py
"""

import knime.extension as knext
import pandas as pd
from typing import Callable
import logging

LOGGER = logging.getLogger(__name__)


def is_numeric(column: knext.Column) -> bool:
    """
    Checks if column is numeric e.g. int, long or double.
    @return: True if Column is numeric
    """
    return column.ktype == knext.double() or column.ktype == knext.int32() or column.ktype == knext.int64()


def is_string(column: knext.Column) -> bool:
    """
    Checks if column is a string type.
    @return: True if Column is a string
    """
    return column.ktype == knext.string()


############################################
# General Helper Class
############################################


def column_exists_or_preset(
    context: knext.ConfigurationContext,
    column: str,
    schema: knext.Schema,
    func: Callable[[knext.Column], bool] = None,
    none_msg: str = "No compatible column found in input table",
    exclude: tuple = (),
) -> str:
    """
    Checks that the given column is not None and exists in the given schema. If none is selected it returns the
    first compatible column that is not listed in `exclude`. If none is compatible it throws an exception.
    """
    if column is None:
        for c in schema:
            if func(c) and c.name not in exclude:
                context.set_warning(f"Preset column to: {c.name}")
                return c.name
        raise knext.InvalidParametersError(none_msg)
    __check_col_and_type(column, schema, func)
    return column


def __check_col_and_type(
    column: str,
    schema: knext.Schema,
    check_type: Callable[[knext.Column], bool] = None,
) -> None:
    """
    Checks that the given column exists in the given schema and that it matches the given type_check function.
    """
    try:
        existing_column = schema[column]
        if check_type is not None and not check_type(existing_column):
            raise knext.InvalidParametersError(f"Column '{str(column)}' has incompatible data type")
    except IndexError:
        raise knext.InvalidParametersError(f"Column '{str(column)}' not available in input table")


############################################
# Generic pandas dataframe/series helper function
############################################


def count_missing_values(column: pd.Series) -> int:
    """
    This function counts the number of missing values in the Pandas Series.
    @return: sum of boolean 1s if missing value exists.
    """
    return column.isnull().sum()


def number_of_rows(df: pd.DataFrame) -> int:
    """
    This function returns the number of rows in the dataframe.
    @return: numerical value, denoting length of the dataframe index.
    """
    return len(df.index)


def count_out_of_range(column: pd.Series, low: float, high: float) -> int:
    """
    Counts non-missing values outside the closed interval [low, high].
    """
    values = column.dropna()
    return int(((values < low) | (values > high)).sum())


def split_id_list(text: str) -> list:
    """
    Splits a comma separated list of identifiers, dropping blanks.
    """
    if not text:
        return []
    return [item.strip() for item in text.split(",") if item.strip()]
