"""
Ledger Engine - Celery Configuration

Celery configuration for scheduled ledger jobs.
Uses Redis as the message broker and result backend.
"""

from celery import Celery
from celery.schedules import crontab

from ledger_engine.config import settings


# Create Celery app
celery_app = Celery(
    'ledger_engine',
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=['ledger_engine.tasks.celery_tasks'],
)

# Celery configuration
celery_app.conf.update(
    # Serialization
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',

    # Timezone
    timezone=settings.scheduler_timezone,
    enable_utc=True,

    # Task execution settings
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_time_limit=1800,  # 30 minutes - runs cover every tenant
    task_soft_time_limit=1500,

    # Worker settings
    worker_prefetch_multiplier=1,

    # Result backend settings
    result_expires=86400,  # 24 hours

    # Retry settings
    task_default_retry_delay=60,  # 1 minute
    task_max_retries=3,

    # Beat schedule for periodic tasks
    beat_schedule={
        # Revalue foreign-currency balances for the month just closed
        'monthly-fx-revaluation': {
            'task': 'ledger_engine.tasks.celery_tasks.monthly_fx_revaluation_task',
            'schedule': crontab(day_of_month=settings.revaluation_day_of_month, hour=2, minute=0),
        },

        # Depreciate fixed assets for the fiscal year just closed
        'annual-depreciation': {
            'task': 'ledger_engine.tasks.celery_tasks.annual_depreciation_task',
            'schedule': crontab(
                month_of_year=settings.depreciation_run_month, day_of_month=2, hour=3, minute=0,
            ),
        },

        # Recompute account balances from posted lines every night
        'verify-account-balances': {
            'task': 'ledger_engine.tasks.celery_tasks.verify_account_balances_task',
            'schedule': crontab(hour=1, minute=30),
        },
    },
)


celery_app.conf.task_routes = {
    'ledger_engine.tasks.celery_tasks.*': {'queue': 'default'},
}
