"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Tontine is the aggregate root; participants and payments scoped by tontine_id

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from tontinepro.models.tontine import Tontine  # noqa: F401
from tontinepro.models.participant import Participant  # noqa: F401
from tontinepro.models.payment import Payment  # noqa: F401
