"""
Regression Design.

Design holds the validated design matrix X and response y. Columns carry
stable names; the intercept is an explicit flag, never inferred from the
data and never parsed from a formula.

Like a furniture maker visiting the lumber yard: "I need these logs
for making chairs." The lumber yard (DataSource) just provides logs.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Iterable, Sequence, TYPE_CHECKING
import numpy as np
from numpy.typing import ArrayLike, NDArray

from pylmselect.core.datasource import DataSource
from pylmselect.core.exceptions import DimensionError, UnknownTermError, ValidationError
from pylmselect.core.validation import (
    check_array,
    check_finite,
    check_2d,
    check_1d,
    check_consistent_length,
    check_min_samples,
    check_unique_names,
)

if TYPE_CHECKING:
    import pandas as pd

INTERCEPT = '(Intercept)'


@dataclass(frozen=True)
class Design:
    """
    Regression design matrix specification.

    Immutable after construction: the arrays are private read-only copies.
    Every transformation (column projection, new response, replaced
    column) returns a new Design.

    Construction:
        Design.from_arrays(X, y, names=['a', 'b'], intercept=True)
        Design.from_dataframe(df, y='target', x=['a', 'b'])
        Design.from_datasource(ds, x=['a','b'], y='c')
        Design.from_datasource(ds)                        # Uses ds['X'] and ds['y']
    """
    _X: NDArray[np.floating[Any]]
    _y: NDArray[np.floating[Any]]
    _n: int
    _p: int
    _names: tuple[str, ...]
    _has_intercept: bool
    _source: DataSource | None = None

    @classmethod
    def from_arrays(
        cls,
        X: ArrayLike,
        y: ArrayLike,
        *,
        names: Sequence[str] | None = None,
        intercept: bool = False,
    ) -> Design:
        """
        Build Design directly from arrays.

        Args:
            X: Predictor matrix (n x p) or vector (n,)
            y: Response (n,)
            names: Column names for X; defaults to x0, x1, ...
            intercept: If True, prepend a column of ones named '(Intercept)'
        """
        X_arr = check_array(X, 'X')
        y_arr = check_array(y, 'y')
        if X_arr.ndim == 1:
            X_arr = X_arr.reshape(-1, 1)
        if y_arr.ndim == 2 and y_arr.shape[1] == 1:
            y_arr = y_arr.ravel()
        check_2d(X_arr, 'X')

        if names is None:
            names = [f'x{j}' for j in range(X_arr.shape[1])]
        return cls._build(X_arr, y_arr, tuple(str(c) for c in names), intercept, source=None)

    @classmethod
    def from_dataframe(
        cls,
        df: 'pd.DataFrame',
        *,
        y: str,
        x: Sequence[str] | None = None,
        intercept: bool = True,
    ) -> Design:
        """
        Build Design from the named columns of a pandas DataFrame.

        Args:
            df: Data frame with numeric columns
            y: Response column
            x: Predictor columns, in model order. Defaults to every column
               except y, in frame order.
            intercept: Include an intercept column (default True)
        """
        return cls.from_datasource(
            DataSource.from_dataframe(df), x=x, y=y, intercept=intercept,
        )

    @classmethod
    def from_datasource(
        cls,
        source: DataSource,
        *,
        x: str | Sequence[str] | None = None,
        y: str | None = None,
        intercept: bool = False,
    ) -> Design:
        """
        Build Design from DataSource.

        Args:
            source: The DataSource
            x: Predictor column(s). If None and source has 'X', uses that.
               If None and y is specified, uses all columns except y.
            y: Response column. If None, uses 'y' from source.
            intercept: Include an intercept column

        Returns:
            Design ready for regression
        """
        # Get y
        if y is not None:
            y_arr = source[y]
        elif 'y' in source:
            y_arr = source['y']
        else:
            raise ValidationError("Must specify y or DataSource must have 'y'")

        # Get X
        if x is not None:
            if isinstance(x, str):
                x = [x]
            X_arr = _get_columns(source, list(x))
            names = tuple(x)
        elif 'X' in source:
            X_arr = np.asarray(source['X'], dtype=np.float64)
            if X_arr.ndim == 1:
                X_arr = X_arr.reshape(-1, 1)
            names = tuple(f'x{j}' for j in range(X_arr.shape[1]))
        elif y is not None:
            # X = all columns except y
            x_cols = [k for k in source.columns if k != y]
            if not x_cols:
                raise ValidationError("No predictor columns available")
            X_arr = _get_columns(source, x_cols)
            names = tuple(x_cols)
        else:
            raise ValidationError("Must specify x or DataSource must have 'X'")

        X_arr = check_array(X_arr, 'X')
        y_arr = check_array(y_arr, 'y')
        if y_arr.ndim == 2 and y_arr.shape[1] == 1:
            y_arr = y_arr.ravel()

        return cls._build(X_arr, y_arr, names, intercept, source=source)

    @classmethod
    def _build(
        cls,
        X: NDArray,
        y: NDArray,
        names: tuple[str, ...],
        intercept: bool,
        source: DataSource | None,
    ) -> Design:
        """Internal builder with validation."""
        check_2d(X, 'X')
        check_1d(y, 'y')
        check_finite(X, 'X')
        check_finite(y, 'y')
        check_consistent_length(X, y, names=('X', 'y'))

        if len(names) != X.shape[1]:
            raise DimensionError(
                f"names has {len(names)} entries but X has {X.shape[1]} columns"
            )

        if intercept:
            if INTERCEPT in names:
                raise ValidationError(
                    f"intercept=True but X already has a column named {INTERCEPT!r}"
                )
            X = np.column_stack([np.ones(X.shape[0]), X])
            names = (INTERCEPT,) + tuple(names)

        check_unique_names(names, 'X')

        n, p = X.shape
        if p == 0:
            raise DimensionError("X: design has no columns")
        check_min_samples(X, p, 'X')

        X = np.array(X, dtype=np.float64, copy=True)
        y = np.array(y, dtype=np.float64, copy=True)
        X.setflags(write=False)
        y.setflags(write=False)

        return cls(
            _X=X, _y=y, _n=n, _p=p,
            _names=tuple(names),
            _has_intercept=bool(intercept) or INTERCEPT in names,
            _source=source,
        )

    # === Properties ===

    @property
    def X(self) -> NDArray[np.floating[Any]]:
        """Design matrix (n x p), read-only."""
        return self._X

    @property
    def y(self) -> NDArray[np.floating[Any]]:
        """Response vector (n,), read-only."""
        return self._y

    @property
    def n(self) -> int:
        """Number of observations."""
        return self._n

    @property
    def p(self) -> int:
        """Number of columns, intercept included."""
        return self._p

    @property
    def column_names(self) -> tuple[str, ...]:
        """Column names in model order."""
        return self._names

    @property
    def has_intercept(self) -> bool:
        return self._has_intercept

    @property
    def predictor_names(self) -> tuple[str, ...]:
        """Column names excluding the intercept."""
        return tuple(c for c in self._names if c != INTERCEPT)

    @property
    def source(self) -> DataSource | None:
        """Original DataSource, if available."""
        return self._source

    # === Column lookup and projections ===

    def column_index(self, term: str | int) -> int:
        """
        Resolve a column name or index to its position.

        Raises:
            UnknownTermError: If the term is not a column of this design
        """
        if isinstance(term, (int, np.integer)) and not isinstance(term, bool):
            if 0 <= term < self._p:
                return int(term)
            raise UnknownTermError(
                f"column index {term} out of range for design with {self._p} columns",
                term=int(term), available=self._names,
            )
        if term in self._names:
            return self._names.index(term)
        raise UnknownTermError(
            f"unknown term {term!r}; available: {list(self._names)}",
            term=term, available=self._names,
        )

    def select(self, columns: Iterable[str | int]) -> Design:
        """
        Project onto a subset of columns, in the given order.

        The intercept is kept only if it is listed.
        """
        idx = [self.column_index(c) for c in columns]
        if len(set(idx)) != len(idx):
            raise ValidationError(f"duplicate columns in selection {list(columns)}")
        names = tuple(self._names[i] for i in idx)
        return Design._build(
            self._X[:, idx], self._y, names, intercept=False, source=self._source,
        )

    def drop(self, terms: str | int | Iterable[str | int]) -> Design:
        """New Design without the given column(s)."""
        if isinstance(terms, (str, int, np.integer)):
            terms = [terms]
        dropped = {self.column_index(t) for t in terms}
        return self.select(i for i in range(self._p) if i not in dropped)

    def with_response(self, y: ArrayLike) -> Design:
        """
        New Design with the same columns and a different response.

        X is already validated and read-only, so it is shared, not copied.
        """
        y_arr = check_array(y, 'y')
        check_1d(y_arr, 'y')
        check_finite(y_arr, 'y')
        check_consistent_length(self._X, y_arr, names=('X', 'y'))
        y_arr = np.array(y_arr, dtype=np.float64, copy=True)
        y_arr.setflags(write=False)
        return replace(self, _y=y_arr)

    def with_column(self, term: str | int, values: ArrayLike) -> Design:
        """New Design with one column's values replaced."""
        j = self.column_index(term)
        col = check_array(values, term if isinstance(term, str) else f'column {j}')
        check_1d(col, 'values')
        X = np.array(self._X, copy=True)
        X[:, j] = col
        return Design._build(X, self._y, self._names, intercept=False, source=self._source)

    # === Sufficient statistics ===

    def XtX(self) -> NDArray[np.floating[Any]]:
        """Compute X'X. Only the naive comparison path uses this."""
        return self._X.T @ self._X

    def Xty(self) -> NDArray[np.floating[Any]]:
        """Compute X'y."""
        return self._X.T @ self._y

    def __repr__(self) -> str:
        return (
            f"Design(n={self._n}, p={self._p}, "
            f"columns={list(self._names)})"
        )


def _get_columns(source: DataSource, names: list[str]) -> NDArray:
    """Stack multiple columns from DataSource into a matrix."""
    arrays = []
    for name in names:
        arr = np.asarray(source[name], dtype=np.float64)
        if arr.ndim == 1:
            arr = arr.reshape(-1, 1)
        arrays.append(arr)
    return np.hstack(arrays)
