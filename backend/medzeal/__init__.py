"""
MedZeal Backend: Application Package
=====================================

What: Back-office API for the MedZeal physiotherapy clinic.
Who:  Imported by uvicorn (medzeal.main:app), pytest and the admin frontend's API layer.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (aggregation, writes)    │  ← credit cycle, inventory, forms, mail
    ├─────────────────────────────────────┤
    │   Live snapshots & document models  │  ← cached store trees, write payloads
    ├─────────────────────────────────────┤
    │   RealtimeStore (Firebase RTDB)     │  ← external managed database
    └─────────────────────────────────────┘

    The realtime database is the only persistence. This package owns no schema;
    it reads subtrees, shapes them in memory and issues single writes.
"""

__version__ = "1.0.0"
