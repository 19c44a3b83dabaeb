"""LanceDB-backed creator repository."""
from __future__ import annotations

import os
from typing import Any, List, Optional, Sequence

import lancedb
import pandas as pd

from app.core.repository import (
    CreatorPredicate,
    CreatorRecord,
    CreatorRepository,
    OrderKey,
    RepositoryError,
    record_from_row,
)


def _quote(value: Any) -> str:
    return "'" + str(value).replace("'", "''") + "'"


def _in_list(column: str, values: Sequence[Any]) -> str:
    return f"{column} IN ({', '.join(_quote(v) for v in values)})"


def compile_predicate(predicate: CreatorPredicate) -> Optional[str]:
    """Translate a predicate into a LanceDB SQL filter string (None when unconstrained)."""
    clauses: List[str] = []

    if predicate.ids is not None:
        if not predicate.ids:
            return "false"
        clauses.append(_in_list("id", sorted(predicate.ids)))
    if predicate.username:
        clauses.append(f"lower(username) = {_quote(predicate.username.lower())}")
    if predicate.platforms:
        clauses.append(_in_list("platform", [p.value for p in predicate.platforms]))
    if predicate.regions:
        clauses.append(_in_list("region", [r.value for r in predicate.regions]))
    if predicate.min_followers is not None:
        clauses.append(f"followers >= {int(predicate.min_followers)}")
    if predicate.max_followers is not None:
        clauses.append(f"followers <= {int(predicate.max_followers)}")
    if predicate.min_viewers is not None:
        clauses.append(f"current_viewers >= {int(predicate.min_viewers)}")
    if predicate.max_viewers is not None:
        clauses.append(f"current_viewers <= {int(predicate.max_viewers)}")
    if predicate.is_live is not None:
        clauses.append(f"is_live = {str(predicate.is_live).lower()}")
    if predicate.uses_camera is not None:
        clauses.append(f"uses_camera = {str(predicate.uses_camera).lower()}")
    if predicate.is_vtuber is not None:
        clauses.append(f"is_vtuber = {str(predicate.is_vtuber).lower()}")
    if predicate.language:
        clauses.append(f"language = {_quote(predicate.language.lower())}")
    if predicate.fraud_statuses:
        clauses.append(_in_list("fraud_check", [s.value for s in predicate.fraud_statuses]))
    elif predicate.exclude_flagged:
        clauses.append("fraud_check != 'FLAGGED'")
    if predicate.gambling_compatible is not None:
        clauses.append(f"gambling_compatible = {str(predicate.gambling_compatible).lower()}")
    if predicate.min_igaming_score is not None:
        clauses.append(f"igaming_score >= {float(predicate.min_igaming_score)}")

    if not clauses:
        return None
    return " AND ".join(clauses)


def sort_dataframe(dataframe: pd.DataFrame, order_by: Optional[Sequence[OrderKey]]) -> pd.DataFrame:
    keys = [key for key in (order_by or []) if key.field in dataframe.columns]
    if dataframe.empty or not keys:
        return dataframe
    ordered = dataframe
    # Sort one key at a time, least significant first, so nulls stay last per key.
    for key in reversed(keys):
        ordered = ordered.sort_values(
            by=key.field,
            ascending=not key.descending,
            kind="mergesort",
            na_position="last",
        )
    return ordered


class LanceCreatorRepository(CreatorRepository):
    """Serve creator reads from a LanceDB table."""

    def __init__(self, db_path: str, table_name: str = "creators", favorites_table: str = "creator_favorites"):
        if not os.path.exists(db_path):
            raise FileNotFoundError(f"Database not found at: {db_path}")
        self.db = lancedb.connect(db_path)
        self.table_name = table_name
        self.favorites_table = favorites_table
        try:
            self.table = self.db.open_table(table_name)
        except Exception as exc:  # pylint: disable=broad-except
            raise RepositoryError(f"Table '{table_name}' not found in database") from exc

    def _query(self, where: Optional[str]) -> pd.DataFrame:
        total = self.table.count_rows(where) if where else self.table.count_rows()
        if total == 0:
            return pd.DataFrame()
        query = self.table.search()
        if where:
            query = query.where(where)
        return query.limit(total).to_pandas()

    def find(
        self,
        predicate: CreatorPredicate,
        order_by: Optional[Sequence[OrderKey]] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[CreatorRecord]:
        where = compile_predicate(predicate)
        try:
            dataframe = self._query(where)
        except Exception as exc:  # pylint: disable=broad-except
            raise RepositoryError(f"Creator query failed: {exc}") from exc

        dataframe = sort_dataframe(dataframe, order_by)
        start = max(0, offset)
        end = None if limit is None else start + max(0, limit)
        window = dataframe.iloc[start:end]
        return [record_from_row(row) for _, row in window.iterrows()]

    def count(self, predicate: CreatorPredicate) -> int:
        where = compile_predicate(predicate)
        try:
            return int(self.table.count_rows(where) if where else self.table.count_rows())
        except Exception as exc:  # pylint: disable=broad-except
            raise RepositoryError(f"Creator count failed: {exc}") from exc

    def find_favorites(self, user_id: str) -> List[CreatorRecord]:
        if self.favorites_table not in self.db.table_names():
            return []
        try:
            favorites = self.db.open_table(self.favorites_table)
            rows = favorites.search().where(f"user_id = {_quote(user_id)}").limit(10000).to_pandas()
        except Exception as exc:  # pylint: disable=broad-except
            raise RepositoryError(f"Favorites lookup failed: {exc}") from exc

        creator_ids = [str(value) for value in rows.get("creator_id", [])]
        if not creator_ids:
            return []
        return self.find(CreatorPredicate(ids=set(creator_ids), exclude_flagged=False))
