from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Literal

import numpy as np
import pandas as pd

GroupOrder = Literal["lexical", "first_appearance"]

POSITION_COLUMN = "position"


class InvalidInputError(ValueError):
    """A row is missing its group, category or numeric value."""


def _as_frame(
    rows: pd.DataFrame | Iterable[Mapping[str, Any]],
    required: list[str],
) -> pd.DataFrame:
    if isinstance(rows, pd.DataFrame):
        missing = [column for column in required if column not in rows.columns]
        if missing:
            raise InvalidInputError(f"Rows missing required column(s): {', '.join(missing)}")
        return rows.reset_index(drop=True).copy()

    records = list(rows)
    for index, row in enumerate(records):
        if not isinstance(row, Mapping):
            raise InvalidInputError(f"Row {index} is not a mapping: {row!r}")
        missing = [column for column in required if column not in row]
        if missing:
            raise InvalidInputError(
                f"Row {index} missing required field(s): {', '.join(missing)}"
            )
    if not records:
        return pd.DataFrame(columns=required)
    return pd.DataFrame.from_records(records)


def validate_rows(
    rows: pd.DataFrame | Iterable[Mapping[str, Any]],
    *,
    group_col: str = "group",
    category_col: str = "category",
    value_col: str = "value",
) -> pd.DataFrame:
    """Return rows as a frame with a numeric value column.

    Raises InvalidInputError for the whole batch as soon as one row lacks a
    group, category or value, or carries a value that is not numeric.
    """
    required = [group_col, category_col, value_col]
    frame = _as_frame(rows, required)
    if frame.empty:
        frame[value_col] = pd.Series(dtype=float)
        return frame

    null_rows = np.flatnonzero(frame[required].isna().any(axis=1).to_numpy())
    if null_rows.size:
        raise InvalidInputError(
            f"Row {int(null_rows[0])} has an empty {group_col}, {category_col} or {value_col}"
        )

    values = pd.to_numeric(frame[value_col], errors="coerce")
    non_numeric = np.flatnonzero(values.isna().to_numpy())
    if non_numeric.size:
        first = int(non_numeric[0])
        raise InvalidInputError(
            f"Row {first} has a non-numeric {value_col}: {frame[value_col].iloc[first]!r}"
        )
    frame[value_col] = values
    return frame


def select_top_k(
    frame: pd.DataFrame,
    k: int,
    *,
    group_col: str = "group",
    value_col: str = "value",
) -> pd.DataFrame:
    """Keep the k rows with the largest absolute value in each group.

    Ties keep input order and surviving rows stay in input order.
    """
    if int(k) < 1:
        raise ValueError("top_k must be >= 1")
    if frame.empty:
        return frame.copy()

    magnitude = frame[value_col].abs().to_numpy(dtype=float)
    by_magnitude = np.argsort(-magnitude, kind="stable")
    rank_in_group = (
        frame.iloc[by_magnitude]
        .groupby(group_col, sort=False, dropna=False)
        .cumcount()
        .to_numpy()
    )
    keep = np.zeros(len(frame), dtype=bool)
    keep[by_magnitude[rank_in_group < int(k)]] = True
    return frame.iloc[np.flatnonzero(keep)].copy()


def _group_ranks(groups: pd.Series, group_order: GroupOrder) -> np.ndarray:
    if group_order == "lexical":
        codes, _ = pd.factorize(groups, sort=True)
    elif group_order == "first_appearance":
        codes, _ = pd.factorize(groups, sort=False)
    else:
        raise ValueError(f"Unsupported group order: {group_order}")
    return codes


def reorder_for_facets(
    rows: pd.DataFrame | Iterable[Mapping[str, Any]],
    top_k: int | None = None,
    *,
    group_col: str = "group",
    category_col: str = "category",
    value_col: str = "value",
    group_order: GroupOrder = "lexical",
    start: int = 1,
) -> pd.DataFrame:
    """Assign each row a global plotting position.

    Rows are stably sorted by (group rank, value) and numbered densely from
    ``start`` across the whole table. Every group therefore owns a contiguous
    slice of positions in which values ascend, so a renderer can place bars
    at ``position`` on one shared axis and free each panel's scale.
    """
    if start not in (0, 1):
        raise ValueError("start must be 0 or 1")

    frame = validate_rows(
        rows, group_col=group_col, category_col=category_col, value_col=value_col
    )
    if top_k is not None:
        frame = select_top_k(frame, top_k, group_col=group_col, value_col=value_col)

    if frame.empty:
        empty = frame.reset_index(drop=True)
        empty[POSITION_COLUMN] = pd.Series(dtype="int64")
        return empty

    ranks = _group_ranks(frame[group_col], group_order)
    order = np.lexsort((frame[value_col].to_numpy(dtype=float), ranks))
    ordered = frame.iloc[order].reset_index(drop=True)
    ordered[POSITION_COLUMN] = np.arange(start, start + len(ordered), dtype=np.int64)
    return ordered


def shared_category_positions(
    rows: pd.DataFrame | Iterable[Mapping[str, Any]],
    *,
    group_col: str = "group",
    category_col: str = "category",
    value_col: str = "value",
    start: int = 1,
) -> pd.DataFrame:
    """Position rows by their category's mean value over all groups.

    A category that recurs across groups keeps one position everywhere, so a
    panel only shows sorted bars when its values agree with the global means.
    """
    frame = validate_rows(
        rows, group_col=group_col, category_col=category_col, value_col=value_col
    )
    if frame.empty:
        frame[POSITION_COLUMN] = pd.Series(dtype="int64")
        return frame

    means = frame.groupby(category_col, sort=False)[value_col].mean()
    ranked = means.sort_values(kind="stable")
    slots = pd.Series(np.arange(start, start + len(ranked), dtype=np.int64), index=ranked.index)
    frame[POSITION_COLUMN] = frame[category_col].map(slots).astype("int64")
    return frame.sort_values([group_col, POSITION_COLUMN]).reset_index(drop=True)


def position_labels(
    ordered: pd.DataFrame,
    *,
    category_col: str = "category",
) -> dict[int, str]:
    """Map each position to the category label drawn at that tick."""
    return {
        int(position): str(label)
        for position, label in zip(ordered[POSITION_COLUMN], ordered[category_col])
    }
