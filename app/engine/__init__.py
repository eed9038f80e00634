"""Irrigation recommendation engine, pure synchronous computation.

Nothing in this package performs I/O.  The schedule builder in
``app.services.schedule_service`` feeds it forecast samples and advisory
estimates and persists what it returns.
"""
