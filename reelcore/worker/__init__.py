"""
Background work.

- jobs: one-shot jobs scheduled by API requests (cascade, feed sampling)
- sweeps: in-process registry of operator-triggered sweeps
- pipelines: the reconciliation pipeline itself
- main: command line entry point for running sweeps outside the API
"""
