"""Load generation.

Modules
───────
  exposition — exposition-format text → label sets
  dataset    — lazy, grow-only label-set cache
  batcher    — rotating dataset window → alert batches
  producer   — one firing cadence against all targets
  loadtest   — concurrent producers for one test case
"""
