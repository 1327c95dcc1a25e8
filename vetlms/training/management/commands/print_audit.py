from django.core.management.base import BaseCommand, CommandError
from django.db import DatabaseError, connection
import json


class Command(BaseCommand):
    help = 'Print recent audit_logs rows as JSON lines'

    def add_arguments(self, parser):
        parser.add_argument('limit', nargs='?', type=int, default=50)
        parser.add_argument('--action', help='Only rows with this action_type, e.g. training_record.denied')

    def handle(self, *args, **options):
        limit = options['limit']
        sql = """
            SELECT id, organization_id, user_id, action_type, entity_type, entity_id, details, ip_address, created_at
            FROM audit_logs
        """
        params = []
        if options.get('action'):
            sql += " WHERE action_type = %s"
            params.append(options['action'])
        sql += " ORDER BY created_at DESC LIMIT %s"
        params.append(limit)

        with connection.cursor() as cur:
            try:
                cur.execute(sql, params)
                rows = cur.fetchall()
            except DatabaseError as e:
                raise CommandError(f"Failed to query audit_logs: {e}")

        for r in rows:
            details = r[6]
            if isinstance(details, str):
                try:
                    details = json.loads(details)
                except ValueError:
                    pass
            log = {
                'id': str(r[0]),
                'organization_id': str(r[1]) if r[1] is not None else None,
                'user_id': str(r[2]) if r[2] is not None else None,
                'action_type': r[3],
                'entity_type': r[4],
                'entity_id': r[5],
                'details': details,
                'ip_address': r[7],
                'created_at': r[8].isoformat() if hasattr(r[8], 'isoformat') else str(r[8]),
            }
            self.stdout.write(json.dumps(log, ensure_ascii=False))
