# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Internal pandas helpers"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

import pandas as pd

if TYPE_CHECKING:
    from ..core.results import QueryResult


def cell_value(value: Any) -> Any:
    """Return a spreadsheet-safe scalar: dicts and lists become JSON text."""
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, default=str, ensure_ascii=False)
    return value


def result_to_dataframe(
    result: "QueryResult",
    convert: Optional[Callable[[Any], Any]] = None,
) -> pd.DataFrame:
    """Build a DataFrame whose columns are the result's row keys, in column order.

    :param result: Executed query page.
    :param convert: Optional per-cell conversion applied before the frame is built.
    """
    keys = [c.key for c in result.columns]
    records: List[Dict[str, Any]] = []
    for row in result.rows:
        if convert is None:
            records.append({k: row.get(k) for k in keys})
        else:
            records.append({k: convert(row.get(k)) for k in keys})
    return pd.DataFrame.from_records(records, columns=keys)
