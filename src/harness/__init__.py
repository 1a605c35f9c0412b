"""Harness — runs load tests and writes correctness reports.

Modules
───────
  merger       — chronological merge of per-stream events
  reporter     — report lines and the per-alert verification summary
  orchestrator — case-by-case state machine, completion signal
  cli          — argparse entry-point
"""
