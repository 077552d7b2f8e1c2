"""
Background jobs.

Periodic tasks that run inside the API process on an APScheduler
background thread.
"""
