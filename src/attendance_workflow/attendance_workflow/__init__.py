"""Attendance Workflow package.

Governs the lifecycle of student attendance records (mark -> submit ->
approve -> publish -> lock) with reopen requests, versioned corrections and an
append-only audit ledger. Organized by feature modules with a thin Flask
controller layer over service/repository layers.
"""
