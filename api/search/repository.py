"""
Search SQL (raw) over the `documents` table.

Schema:
  documents(type text, document jsonb, body tsvector)

Full-text matching uses `to_tsquery('english', ...)` against `body`, ranked
with `ts_rank_cd`. Field filters use jsonb containment on `document`.
"""

from __future__ import annotations

import json
from typing import Any

from core import db


def _filter_clause(key: str, value: Any, arg) -> str | None:
    values = value if isinstance(value, list) else [value]
    if not values:
        return None
    # Several values for one field match any of them.
    clauses = [f"d.document @> {arg(json.dumps({key: v}))}::jsonb" for v in values]
    return "(" + " OR ".join(clauses) + ")"


async def search_documents(
    *,
    ts_query: str | None,
    types: list[str] | None,
    filters: dict[str, Any],
    limit: int,
    offset: int = 0,
) -> list[dict[str, Any]]:
    """
    Return rows of (type, document as JSON text, rank).

    With no `ts_query` every document matches with rank 1 and rows come back
    in storage order.
    """
    args: list[Any] = []

    def arg(value: Any) -> str:
        args.append(value)
        return f"${len(args)}"

    where: list[str] = []
    if ts_query:
        tsq = arg(ts_query)
        rank_sql = f"ts_rank_cd(d.body, to_tsquery('english', {tsq}))"
        where.append(f"d.body @@ to_tsquery('english', {tsq})")
        order_sql = "ORDER BY rank DESC"
    else:
        rank_sql = "1.0::float8"
        order_sql = ""

    if types:
        where.append(f"d.type = ANY({arg(types)}::text[])")

    for key, value in filters.items():
        clause = _filter_clause(key, value, arg)
        if clause is not None:
            where.append(clause)

    where_sql = ("WHERE " + "\n          AND ".join(where)) if where else ""
    limit_arg = arg(limit)
    offset_arg = arg(offset)

    return await db.fetch_all(
        f"""
        SELECT
          d.type,
          d.document::text AS document,
          ({rank_sql})::float8 AS rank
        FROM documents d
        {where_sql}
        {order_sql}
        LIMIT {limit_arg}
        OFFSET {offset_arg}
        """,
        *args,
    )
