from datetime import timedelta

from django.core.management.base import BaseCommand

from quizzes.services.attempt_service import release_stuck_attempts


class Command(BaseCommand):
    help = "Return quiz attempts stuck in 'processing' back to 'in_progress'."

    def add_arguments(self, parser):
        parser.add_argument(
            '--older-than',
            type=int,
            default=None,
            help="Seconds an attempt must have been locked (default: QUIZ_PROCESSING_TIMEOUT).",
        )

    def handle(self, *args, **options):
        older_than = options['older_than']
        released = release_stuck_attempts(
            older_than=timedelta(seconds=older_than) if older_than is not None else None
        )
        self.stdout.write(self.style.SUCCESS(f"Released {released} stuck attempt(s)."))
