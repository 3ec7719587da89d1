from django.conf import settings
from django.core.management.base import BaseCommand
from django_rq import get_scheduler
from jobs.tasks import sweep_unreconciled

class Command(BaseCommand):
    help = "Apply rq-scheduler cron schedule for the payment reconciliation sweep"

    def handle(self, *args, **options):
        scheduler = get_scheduler("default")
        # Clear existing sweep jobs to avoid duplicates
        for job in scheduler.get_jobs():
            if job.func_name.endswith("sweep_unreconciled"):
                scheduler.cancel(job)
        scheduler.cron(settings.RECONCILE_CRON, func=sweep_unreconciled, repeat=None, queue_name="default")
        self.stdout.write(self.style.SUCCESS(f"Scheduled reconciliation sweep with cron '{settings.RECONCILE_CRON}'"))
