"""
Course deletion with a foreign-key aware cascade.

The set of tables holding course rows is discovered from the live schema at
delete time rather than hard-coded, so tables added later are still cleared
before the course row goes.
"""
from dataclasses import dataclass
import logging
import uuid

from django.db import connection, transaction

from courses.exceptions import CourseNotFound
from courses.models import Course
from courses.services.dependency_graph import order_tables
from training.services.audit import record_audit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ForeignKeyReference:
    table: str
    column: str
    referenced_table: str
    referenced_column: str


_POSTGRES_FOREIGN_KEYS_SQL = """
    SELECT tc.table_name, kcu.column_name, ccu.table_name, ccu.column_name
    FROM information_schema.table_constraints tc
    JOIN information_schema.key_column_usage kcu
      ON tc.constraint_name = kcu.constraint_name AND tc.table_schema = kcu.table_schema
    JOIN information_schema.constraint_column_usage ccu
      ON ccu.constraint_name = tc.constraint_name AND ccu.table_schema = tc.table_schema
    WHERE tc.constraint_type = 'FOREIGN KEY' AND tc.table_schema = current_schema()
"""


def fetch_foreign_keys(cursor):
    """Return every foreign key in the current schema as ForeignKeyReference rows"""
    if connection.vendor == 'postgresql':
        cursor.execute(_POSTGRES_FOREIGN_KEYS_SQL)
        return [ForeignKeyReference(*row) for row in cursor.fetchall()]

    references = []
    for table in connection.introspection.table_names(cursor):
        relations = connection.introspection.get_relations(cursor, table)
        for column, (referenced_column, referenced_table) in relations.items():
            references.append(ForeignKeyReference(table, column, referenced_table, referenced_column))
    return references


def referencing_columns(foreign_keys, table, column):
    """Map each table that points at `table.column` to its referencing columns, in discovery order"""
    columns = {}
    for fk in foreign_keys:
        if fk.referenced_table == table and fk.referenced_column == column and fk.table != table:
            columns.setdefault(fk.table, [])
            if fk.column not in columns[fk.table]:
                columns[fk.table].append(fk.column)
    return columns


def edges_between(foreign_keys, tables):
    members = set(tables)
    return [
        (fk.table, fk.referenced_table)
        for fk in foreign_keys
        if fk.table in members and fk.referenced_table in members
    ]


def _delete_dependent_rows(cursor, table, columns, key):
    quote = connection.ops.quote_name
    where = ' OR '.join(f'{quote(column)} = %s' for column in columns)
    cursor.execute(f'DELETE FROM {quote(table)} WHERE {where}', [key] * len(columns))
    return cursor.rowcount


def delete_course(course_id, organization_id, location_id=None, actor=None, request=None):
    """
    Delete a course and every row that references it.

    Args:
        course_id: the course to delete
        organization_id: caller's organization; the course must belong to it
        location_id: when given, the course must also belong to this location
        actor: Profile performing the deletion, for the audit log

    Returns:
        dict with the deleted course's `id`, `title` and per-table `deleted_rows`

    Raises:
        CourseNotFound: no course matches the id within the caller's scope;
            nothing is changed
    """
    try:
        course_uuid = uuid.UUID(str(course_id))
    except ValueError:
        raise CourseNotFound()

    course_table = Course._meta.db_table
    pk_column = Course._meta.pk.column

    with transaction.atomic():
        scope = {'pk': course_uuid, 'organization_id': organization_id}
        if location_id is not None:
            scope['location_id'] = location_id
        course = Course.objects.select_for_update().filter(**scope).first()
        if course is None:
            raise CourseNotFound()

        key = Course._meta.pk.get_db_prep_value(course.pk, connection)
        deleted_rows = {}

        with connection.cursor() as cursor:
            foreign_keys = fetch_foreign_keys(cursor)
            columns_by_table = referencing_columns(foreign_keys, course_table, pk_column)
            tables = list(columns_by_table)
            ordered = order_tables(tables, edges_between(foreign_keys, tables))
            logger.info(f'Deleting course {course.pk}: clearing {ordered}')

            for table in ordered:
                deleted_rows[table] = _delete_dependent_rows(cursor, table, columns_by_table[table], key)

            quote = connection.ops.quote_name
            cursor.execute(f'DELETE FROM {quote(course_table)} WHERE {quote(pk_column)} = %s', [key])
            deleted_rows[course_table] = cursor.rowcount

        record_audit(
            'course.deleted',
            'course',
            course.pk,
            organization_id=course.organization_id,
            actor=actor,
            details={'title': course.title, 'deleted_rows': deleted_rows},
            request=request,
        )

    logger.info(f'Course {course.pk} deleted ({sum(deleted_rows.values())} rows)')
    return {'id': str(course.pk), 'title': course.title, 'deleted_rows': deleted_rows}
