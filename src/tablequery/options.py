from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

import pandas as pd
from tablequery.strategy import get_available_dialects, get_strategy_class
from tablequery.strategy import is_supported_dialect

__all__ = [
    'DatabaseOptions',
    'iterdict_data_loader',
    'pandas_numpy_data_loader',
]


def iterdict_data_loader(records: Sequence[dict], columns: Sequence[str],
                         **kwargs) -> list[dict]:
    """Minimal data loader: the records as a list.

    Accepts additional keyword arguments for compatibility with other data
    loaders, but doesn't use them.
    """
    if not records:
        return []
    return list(records)


def pandas_numpy_data_loader(records: Sequence[dict], columns: Sequence[str],
                             **kwargs) -> pd.DataFrame:
    """Standard pandas DataFrame loader using NumPy.

    Always returns a DataFrame, never None, with columns preserved for empty results.
    """
    if not records:
        return pd.DataFrame(columns=list(columns))
    return pd.DataFrame.from_records(list(records), columns=list(columns))


@dataclass
class DatabaseOptions:
    """Options

    supported driver names: `postgresql`, `sqlite`

    For sqlite only `database` is required (a file path or `:memory:`).
    `charset` accepts MySQL-style names such as `utf8` and `utf8mb4`.
    `data_loader` shapes the rows returned by fetch(); fetch_one() always
    returns a plain dict.
    """
    drivername: str = 'postgresql'
    hostname: str = None
    username: str = None
    password: str = None
    database: str = None
    charset: str = 'utf8'
    port: int = 0
    timeout: int = 0
    data_loader: Callable[..., Any] | None = None

    def __post_init__(self):
        if not is_supported_dialect(self.drivername):
            available = get_available_dialects()
            raise ValueError(f'drivername must be one of: {available}')
        strategy_cls = get_strategy_class(self.drivername)
        strategy_cls.validate_options(self)
        if self.data_loader is None:
            self.data_loader = iterdict_data_loader

    def __repr__(self) -> str:
        masked = '***' if self.password else None
        return (f'DatabaseOptions(drivername={self.drivername!r}, hostname={self.hostname!r}, '
                f'username={self.username!r}, password={masked!r}, database={self.database!r}, '
                f'charset={self.charset!r}, port={self.port!r}, timeout={self.timeout!r})')
