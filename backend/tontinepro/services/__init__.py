"""Services Layer — orchestration of core rules over the unit of work.

Invariants:
    - Every write runs under the per-tontine lock and commits once (services/guards.py)
    - Services raise TontineError subclasses; routes never catch them

Design Decisions:
    - One service per aggregate concern: tontine, roster, order, ledger (ADR: ExMA no god objects)
"""
