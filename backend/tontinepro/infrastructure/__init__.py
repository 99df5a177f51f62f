"""Infrastructure Layer — IO adapters: database sessions, SQL repositories, logging, events.

Invariants:
    - Infrastructure may import from core/ and models/, never from api/ or services/

Design Decisions:
    - Implementations of core/repository_protocols.py live here (ADR: dependency inversion)
"""
