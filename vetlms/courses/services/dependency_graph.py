"""
Delete ordering for tables linked by foreign keys.

Pure functions only; the introspection and SQL live in `deletion.py`.
"""
from collections import deque


def _unique(items):
    seen = set()
    ordered = []
    for item in items:
        if item not in seen:
            seen.add(item)
            ordered.append(item)
    return ordered


def order_tables(tables, edges):
    """
    Order tables so that every referencing table comes before the table it references.

    Args:
        tables: table names, in discovery order
        edges: (referencing_table, referenced_table) pairs

    Edges that point outside `tables` and self-references are ignored. Tables
    left over by a cycle are appended in discovery order, so every input table
    appears exactly once in the result.
    """
    tables = _unique(tables)
    members = set(tables)

    dependents = {table: [] for table in tables}
    in_degree = {table: 0 for table in tables}
    for referencing, referenced in _unique(edges):
        if referencing == referenced:
            continue
        if referencing not in members or referenced not in members:
            continue
        # referencing must be emptied first, so the referenced table waits on it
        dependents[referencing].append(referenced)
        in_degree[referenced] += 1

    queue = deque(table for table in tables if in_degree[table] == 0)
    ordered = []
    while queue:
        table = queue.popleft()
        ordered.append(table)
        for referenced in dependents[table]:
            in_degree[referenced] -= 1
            if in_degree[referenced] == 0:
                queue.append(referenced)

    if len(ordered) < len(tables):
        placed = set(ordered)
        ordered.extend(table for table in tables if table not in placed)

    return ordered
