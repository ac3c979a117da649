"""
Unit of Work Pattern + Repositories - Infrastructure Layer
==========================================================
"""
from typing import Callable

from sqlalchemy import select
from sqlalchemy.orm import Session


class UnitOfWork:
    """
    Thin Unit of Work for transaction management.

    Usage:
        with UnitOfWork(SessionLocal) as uow:
            sprout = uow.sprouts.get(sprout_id)
            ...
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory
        self._session: Session | None = None

    def __enter__(self) -> "UnitOfWork":
        """Open a session and start a transaction"""
        self._session = self._session_factory()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Commit or rollback, then close the session"""
        try:
            if self._session:
                if exc_type is None:
                    self._session.commit()
                else:
                    self._session.rollback()
        finally:
            if self._session:
                self._session.close()
                self._session = None

    @property
    def session(self) -> Session:
        if self._session is None:
            raise RuntimeError(
                "Session not available. Use 'with UnitOfWork(...) as uow:' pattern."
            )
        return self._session

    @property
    def twigs(self) -> "TwigRepository":
        return TwigRepository(self.session)

    @property
    def sprouts(self) -> "SproutRepository":
        return SproutRepository(self.session)

    @property
    def ledger(self) -> "LedgerStateRepository":
        return LedgerStateRepository(self.session)


class TwigRepository:
    """Repository for Twig and Leaf - CRUD only"""

    def __init__(self, session: Session):
        self._session = session

    def get(self, twig_id: str):
        from models import Twig

        return self._session.get(Twig, twig_id)

    def get_leaf(self, leaf_id: str):
        from models import Leaf

        return self._session.get(Leaf, leaf_id)

    def add(self, twig) -> None:
        self._session.add(twig)


class SproutRepository:
    """Repository for Sprout - CRUD only"""

    def __init__(self, session: Session):
        self._session = session

    def get(self, sprout_id: str):
        from models import Sprout

        return self._session.get(Sprout, sprout_id)

    def list_by_leaf(self, twig_id: str, leaf_id: str) -> list:
        from models import Sprout

        stmt = (
            select(Sprout)
            .where(Sprout.twig_id == twig_id)
            .where(Sprout.leaf_id == leaf_id)
            .order_by(Sprout.created_at)
            .execution_options(populate_existing=True)  # states committed by other sessions
        )
        return list(self._session.execute(stmt).scalars().all())

    def add(self, sprout) -> None:
        self._session.add(sprout)


class LedgerStateRepository:
    """Repository for the single LedgerState row"""

    LEDGER_ID = 1

    def __init__(self, session: Session):
        self._session = session

    def get(self):
        from models import LedgerState

        return self._session.get(LedgerState, self.LEDGER_ID)

    def get_for_update(self):
        """
        Reload the row with a pessimistic lock (SELECT ... FOR UPDATE).

        populate_existing overwrites the copy already in the identity map,
        so balances read afterwards are the committed ones.
        """
        from models import LedgerState

        stmt = (
            select(LedgerState)
            .where(LedgerState.id == self.LEDGER_ID)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return self._session.execute(stmt).scalar_one_or_none()

    def add(self, state) -> None:
        self._session.add(state)
