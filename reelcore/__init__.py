"""
ReelCore Backend

Content lifecycle consistency engine for short-form video ("reels").

Package Structure:
==================
    reelcore/
    ├── api/        ← FastAPI application (thin HTTP boundary)
    ├── worker/     ← Background jobs (reconciliation, cascade cleanup)
    ├── shared/     ← Shared code (models, repositories, services, etc.)
    └── config/     ← Configuration

Running the Application:
========================
    # API Server
    uvicorn reelcore.api.main:app --reload

    # Worker (operator sweeps)
    python -m reelcore.worker.main sweep
    python -m reelcore.worker.main counters
"""
