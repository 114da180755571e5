"""Attendance verification package.

Organized by feature modules (identity, qr, attendance, stats, ...) with a thin
Flask controller layer on top of service/repository layers. Every "same day"
decision goes through ``common.clock.CivilClock``.
"""
