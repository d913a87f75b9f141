"""Data-manipulation verbs and joins with key diagnostics."""
import warnings

import pandas as pd
from loguru import logger

JOIN_TYPES = ["inner", "left", "right", "full", "semi", "anti"]


class JoinKeyWarning(UserWarning):
    """Emitted when join keys are likely to produce a surprising result."""


def _resolve_keys(left, right, by):
    if by is not None:
        return [by] if isinstance(by, str) else list(by)
    shared = [c for c in left.columns if c in right.columns]
    if not shared:
        raise ValueError("No common columns to join on; pass 'by' explicitly")
    logger.info("Joining, by = {}", shared)
    return shared


def _key_kind(s):
    """Coarse key type; int and float keys share a kind and merge natively."""
    if pd.api.types.is_bool_dtype(s):
        return "bool"
    if pd.api.types.is_numeric_dtype(s):
        return "numeric"
    if pd.api.types.is_datetime64_any_dtype(s):
        return "datetime"
    return "text"


def _check_keys(left, right, keys):
    """Warn about many-to-many keys and mismatched key kinds; return aligned copies."""
    left_dup = left.duplicated(keys).any()
    right_dup = right.duplicated(keys).any()
    if left_dup and right_dup:
        warnings.warn(
            f"Many-to-many relationship on {keys}: duplicate keys on both sides "
            "multiply rows in the result",
            JoinKeyWarning,
            stacklevel=3,
        )

    mismatched = [k for k in keys if _key_kind(left[k]) != _key_kind(right[k])]
    if mismatched:
        warnings.warn(
            f"Key columns {mismatched} have different types "
            f"({[str(left[k].dtype) for k in mismatched]} vs "
            f"{[str(right[k].dtype) for k in mismatched]}); comparing as strings",
            JoinKeyWarning,
            stacklevel=3,
        )
        left = left.astype({k: str for k in mismatched})
        right = right.astype({k: str for k in mismatched})
    return left, right


def join(left, right, how="inner", by=None, suffixes=(".x", ".y")):
    """Mutating and filtering joins in one place.

    ``semi`` keeps the left rows that have a match and ``anti`` the ones that
    do not; neither adds right-hand columns or duplicates left rows.
    """
    if how not in JOIN_TYPES:
        raise ValueError(f"how must be one of {JOIN_TYPES}, got {how!r}")
    keys = _resolve_keys(left, right, by)
    left, right = _check_keys(left, right, keys)

    if how in ("semi", "anti"):
        matched = left[keys].merge(right[keys].drop_duplicates(), on=keys, how="left", indicator=True)
        mask = (matched["_merge"] == "both").to_numpy()
        return left[mask if how == "semi" else ~mask]

    pandas_how = "outer" if how == "full" else how
    return left.merge(right, on=keys, how=pandas_how, suffixes=suffixes)


def filter_rows(df, *conditions):
    """Keep rows where every boolean condition (Series or callable) holds."""
    mask = pd.Series(True, index=df.index)
    for cond in conditions:
        mask &= cond(df) if callable(cond) else cond
    return df[mask]


def select_cols(df, *columns, starts_with=None):
    cols = list(columns)
    if starts_with:
        cols += [c for c in df.columns if c.startswith(starts_with) and c not in cols]
    return df[cols]


def mutate(df, **new_columns):
    return df.assign(**new_columns)


def arrange(df, *columns, desc=()):
    """Sort by columns; those named in ``desc`` sort descending."""
    columns = list(columns)
    return df.sort_values(columns, ascending=[c not in desc for c in columns], kind="mergesort")


def summarise_by(df, by, **aggregations):
    """``group_by(...) |> summarise(...)`` with named aggregations."""
    return df.groupby(by, sort=True, observed=True).agg(**aggregations).reset_index()
