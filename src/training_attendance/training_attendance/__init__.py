"""Training Attendance package.

This package is organized by feature modules (sections, timeslots, attendance, batch, ...)
with a thin Flask controller layer over service/repository layers.
"""
