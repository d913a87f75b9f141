"""
Fast tabular-data idioms expressed with pandas.

The chapter on high-performance tables teaches the ``DT[i, j, by]`` reading:
take rows ``i``, compute ``j``, grouped ``by``. The helpers here map each part
onto the pandas call that does the same job so the page can show both side by
side.
"""
import pandas as pd


def _select_rows(df, i):
    if i is None:
        return df
    if callable(i):
        return df[i(df)]
    if isinstance(i, str):
        return df.query(i)
    return df[i]


def dt_query(df, i=None, j=None, by=None, sort_by=False):
    """Evaluate ``DT[i, j, by]``.

    ``i`` filters rows: a boolean mask, a callable taking the frame, or a
    ``DataFrame.query`` string. ``j`` is a column, a list of columns, or a dict
    of named aggregations ``{"new": (column, func)}``. ``by`` groups the
    aggregation; groups keep first-appearance order unless ``sort_by`` is set.
    """
    rows = _select_rows(df, i)
    if j is None:
        if by is not None:
            raise ValueError("'by' needs an aggregation in 'j'")
        return rows
    if isinstance(j, dict):
        if by is None:
            return pd.DataFrame({name: [rows[col].agg(func)] for name, (col, func) in j.items()})
        return rows.groupby(by, sort=sort_by, observed=True).agg(**j).reset_index()
    if by is not None:
        raise ValueError("grouping with 'by' needs 'j' as a dict of named aggregations")
    return rows[j]


def count_by(df, by):
    """``DT[, .N, by]``: row counts per group in first-appearance order."""
    return df.groupby(by, sort=False, observed=True).size().reset_index(name="N")


def set_key(df, key):
    """Sort by the key columns and index on them, like ``setkey``."""
    key = [key] if isinstance(key, str) else list(key)
    return df.sort_values(key, kind="mergesort").set_index(key)


def keyed_lookup(df, values):
    """Subset a keyed table by key values, in the order given.

    Every row carrying a requested key is returned, so non-unique keys bring back
    all their rows. Absent keys come back as a single NaN row each.
    """
    values = list(values)
    empty = df.iloc[:0]
    if not values:
        return empty
    pieces = [df.loc[[v]] if v in df.index else empty.reindex([v]) for v in values]
    out = pd.concat(pieces)
    out.index.names = df.index.names
    return out


def assign_by_group(df, column, source, func, by=None):
    """``DT[, column := func(source), by]``. Mutates ``df`` and returns it."""
    if by is None:
        df[column] = df[source].agg(func)
    else:
        df[column] = df.groupby(by, observed=True)[source].transform(func)
    return df


def rolling_join(left, right, on, by=None, direction="backward"):
    """Match each left row to the nearest right row on ``on`` (``roll = TRUE``)."""
    left = left.sort_values(on)
    right = right.sort_values(on)
    return pd.merge_asof(left, right, on=on, by=by, direction=direction)


def chain(df, *steps):
    """Apply ``DT[...][...]`` steps in order; each step is a dict of dt_query kwargs."""
    for step in steps:
        df = dt_query(df, **step)
    return df
