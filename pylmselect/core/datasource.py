"""
Universal DataSource for pylmselect.

DataSource is the "I have data" abstraction. It doesn't know or care
what model consumes it. It just provides named numeric columns.

Like a lumber yard: provides raw logs. Doesn't care if you're making
a single fit, a subset search or a Box-Cox profile.

Usage:
    from pylmselect.core import DataSource
    
    ds = DataSource.from_arrays(X=X, y=y)
    ds = DataSource.from_file("data.csv")
    ds = DataSource.from_dataframe(df)
    
    # Access arrays
    ds.keys()  # frozenset({'X', 'y'})
    X = ds['X']
    y = ds['y']
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TYPE_CHECKING
import numpy as np
from numpy.typing import NDArray

from pylmselect.core.exceptions import ValidationError

if TYPE_CHECKING:
    import pandas as pd


@dataclass
class DataSource:
    """
    Universal data container. Model-agnostic.
    
    Construct via factory classmethods, not directly.
    """
    _data: dict[str, Any]
    _metadata: dict[str, Any] = field(default_factory=dict)
    
    # === Array Access ===
    
    def keys(self) -> frozenset[str]:
        """
        Return the names of all available arrays.
        
        Example:
            >>> ds = DataSource.from_arrays(X=X, y=y)
            >>> ds.keys()
            frozenset({'X', 'y'})
        """
        return frozenset(k for k in self._data.keys() if not k.startswith('_'))
    
    def __getitem__(self, key: str) -> Any:
        """
        Access a named array.
            
        Raises:
            KeyError: If key not found, with helpful message listing available keys
        """
        if key not in self._data:
            available = sorted(self.keys())
            raise KeyError(
                f"DataSource has no array '{key}'. Available: {available}"
            )
        return self._data[key]
    
    def __contains__(self, key: str) -> bool:
        """Check if a key exists."""
        return key in self._data
    
    # === Properties ===
    
    @property
    def n_observations(self) -> int:
        """Number of statistical units (rows)."""
        return self._metadata.get('n_observations', 0)
    
    @property
    def columns(self) -> list[str]:
        """Column names in their original order (tabular sources only)."""
        return list(self._metadata.get('columns', sorted(self.keys())))
    
    @property
    def metadata(self) -> dict[str, Any]:
        """Source metadata (copy)."""
        return self._metadata.copy()
    
    # === Factory Methods ===
    
    @classmethod
    def from_arrays(
        cls,
        *,
        X: NDArray | None = None,
        y: NDArray | None = None,
        data: NDArray | None = None,
        columns: list[str] | None = None,
        **named_arrays: NDArray,
    ) -> DataSource:
        """Construct from NumPy arrays."""
        storage: dict[str, Any] = {}
        n_obs: int | None = None
        
        if X is not None:
            X = np.asarray(X, dtype=np.float64)
            if X.ndim == 1:
                X = X.reshape(-1, 1)
            storage['X'] = X
            n_obs = X.shape[0]
            
        if y is not None:
            y = np.asarray(y, dtype=np.float64)
            if y.ndim == 2 and y.shape[1] == 1:
                y = y.ravel()
            storage['y'] = y
            n_obs = n_obs or y.shape[0]
        
        if data is not None:
            data = np.asarray(data, dtype=np.float64)
            n_obs = n_obs or data.shape[0]
            if columns is not None:
                if len(columns) != data.shape[1]:
                    raise ValidationError(
                        f"columns has {len(columns)} names but data has "
                        f"{data.shape[1]} columns"
                    )
                for i, col in enumerate(columns):
                    storage[col] = data[:, i]
            else:
                storage['_data'] = data
        
        for name, arr in named_arrays.items():
            storage[name] = np.asarray(arr, dtype=np.float64)
            n_obs = n_obs or storage[name].shape[0]
        
        metadata: dict[str, Any] = {'n_observations': n_obs, 'source': 'arrays'}
        if columns is not None:
            metadata['columns'] = list(columns)
        return cls(_data=storage, _metadata=metadata)
    
    @classmethod
    def from_file(cls, path: str | Path, *, columns: list[str] | None = None) -> DataSource:
        """Construct from file (CSV, TSV, NPY)."""
        path = Path(path)
        suffix = path.suffix.lower()
        
        if suffix in ('.csv', '.tsv'):
            import pandas as pd
            sep = '\t' if suffix == '.tsv' else ','
            df = pd.read_csv(path, usecols=columns, sep=sep)
            return cls.from_dataframe(df, source_path=str(path))
        elif suffix == '.npy':
            data = np.load(path)
            return cls.from_arrays(data=data, columns=columns)
        else:
            raise ValidationError(f"Unknown file format: {suffix}")
    
    @classmethod
    def from_dataframe(cls, df: 'pd.DataFrame', *, source_path: str | None = None) -> DataSource:
        """
        Construct from pandas DataFrame.
        
        Every column must be numeric; missing values are kept as NaN and
        rejected later by the design validators, so that row deletion is
        always an explicit caller decision.
        """
        storage: dict[str, Any] = {}
        
        for col in df.columns:
            try:
                storage[str(col)] = df[col].to_numpy(dtype=np.float64)
            except (TypeError, ValueError) as e:
                raise ValidationError(
                    f"column {col!r} is not numeric: {e}"
                ) from e
        
        metadata = {
            'n_observations': len(df),
            'source': 'dataframe',
            'columns': [str(c) for c in df.columns],
        }
        if source_path:
            metadata['source_path'] = source_path
            
        return cls(_data=storage, _metadata=metadata)
    
    @classmethod  
    def build(cls, *args, **kwargs) -> DataSource:
        """
        Convenience factory that dispatches to appropriate from_* method.
        
        Examples:
            DataSource.build(X=X, y=y)  # from_arrays
            DataSource.build("data.csv")  # from_file
        """
        if args and isinstance(args[0], (str, Path)):
            return cls.from_file(args[0], **kwargs)
        else:
            return cls.from_arrays(**kwargs)
