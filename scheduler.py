from datetime import datetime, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from config import Settings

CHANNEL_JOB_ID = "post_random_channel"
DM_JOB_ID = "message_random_user"


class OutreachScheduler:
    """
    Interval registration only. Everything a tick actually does lives in Outreach,
    so it can be exercised without timers.
    """

    def __init__(self, outreach, settings: Settings, scheduler: AsyncIOScheduler = None):
        self.outreach = outreach
        self.settings = settings
        self.scheduler = scheduler or AsyncIOScheduler(timezone="UTC")
        self._register()

    def _register(self):
        # post to a public channel every hour (by default)
        self.scheduler.add_job(
            self.outreach.run_tick,
            trigger="interval",
            hours=self.settings.channel_outreach_hours,
            args=[CHANNEL_JOB_ID, self.outreach.post_to_random_channel],
            id=CHANNEL_JOB_ID,
            coalesce=True,
            misfire_grace_time=None,
            max_instances=1,
            replace_existing=True,
        )

        # DM a random active user every 3 hours (by default)
        self.scheduler.add_job(
            self.outreach.run_tick,
            trigger="interval",
            hours=self.settings.dm_outreach_hours,
            args=[DM_JOB_ID, self.outreach.message_random_user],
            id=DM_JOB_ID,
            coalesce=True,
            misfire_grace_time=None,
            max_instances=1,
            replace_existing=True,
        )

    def start(self, paused: bool = False):
        # stamped here, not at construction, so a slow connect can't make the
        # startup runs look missed; both jobs fire once right away
        now = datetime.now(timezone.utc)
        for job_id in (CHANNEL_JOB_ID, DM_JOB_ID):
            self.scheduler.modify_job(job_id, next_run_time=now)

        # needs a running event loop
        self.scheduler.start(paused=paused)

    def stop(self):
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)

    def jobs(self):
        return self.scheduler.get_jobs()
