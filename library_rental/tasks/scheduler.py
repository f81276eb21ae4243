# library_rental/tasks/scheduler.py
from __future__ import annotations

import atexit
import os

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger


def start_scheduler(app):
    """
    Starts the periodic inventory audit.
    - Skipped when INVENTORY_AUDIT_ENABLED is off or in testing.
    - Debug reloader runs two processes; only the real one schedules.
    """
    if not app.config.get("INVENTORY_AUDIT_ENABLED") or app.testing:
        app.logger.info("[scheduler] Inventory audit disabled.")
        return None

    # WERKZEUG_RUN_MAIN=true marks the reloader's serving process
    if app.debug and os.environ.get("WERKZEUG_RUN_MAIN") != "true":
        app.logger.info("[scheduler] Debug reloader secondary process: scheduler skipped.")
        return None

    from library_rental.tasks.inventory_audit import run_inventory_audit_job

    minutes = int(app.config.get("INVENTORY_AUDIT_INTERVAL_MINUTES", 30))
    scheduler = BackgroundScheduler(timezone="UTC")

    scheduler.add_job(
        func=run_inventory_audit_job,
        args=[app],
        trigger=IntervalTrigger(minutes=minutes),
        id="inventory_audit_job",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=120,
    )

    scheduler.start()
    app.logger.info(f"[scheduler] Inventory audit started (every {minutes} minutes).")
    app.extensions["apscheduler"] = scheduler

    # stop the worker thread with the process
    atexit.register(lambda: scheduler.shutdown(wait=False) if scheduler.running else None)
    return scheduler
