"""
Request a patient message for one consultation and poll until it is generated.
Run: python manage.py request_message 900101-1234568 1
"""
import time

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from clinic_dashboard.exceptions import BaseAppException

from clinic import services


class Command(BaseCommand):
    help = 'Insert a message generation request and poll its status'

    def add_arguments(self, parser):
        parser.add_argument('patient_id', help='national ID of the patient')
        parser.add_argument('consultation_id', type=int)
        parser.add_argument('--interval', type=float, default=None)
        parser.add_argument('--max-checks', type=int, default=None)

    def handle(self, *args, **options):
        interval = options['interval'] if options['interval'] is not None else settings.MESSAGE_POLL_INTERVAL
        max_checks = options['max_checks'] or settings.MESSAGE_POLL_MAX_CHECKS

        try:
            request_id = services.request_message(options['patient_id'], options['consultation_id'])["data"]["request_id"]
        except BaseAppException as e:
            raise CommandError(f"{e.code}: {e.message}")
        self.stdout.write(f'Requested message #{request_id}, checking every {interval}s')

        for check in range(1, max_checks + 1):
            time.sleep(interval)
            data = services.message_status([request_id])["data"]
            result = data["results"][0]
            self.stdout.write(f'Check {check}/{max_checks}: {result["status"]}')
            if result["status"] == 'failed':
                raise CommandError(f'Generation failed: {result.get("error")}')
            if not data["pending_ids"]:
                self.stdout.write(self.style.SUCCESS('Message generated:'))
                self.stdout.write(result["custom_message"])
                return

        self.stdout.write(self.style.WARNING('Max checks reached, the message may not be generated yet'))
