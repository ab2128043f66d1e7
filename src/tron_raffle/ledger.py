from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from sqlalchemy import Boolean, Integer, String, create_engine, select
from sqlalchemy.engine import make_url
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Mapped, declarative_base, mapped_column, sessionmaker

from .errors import DuplicateTransaction
from .participation import Participant, format_amount, parse_amount

log = logging.getLogger(__name__)

Base = declarative_base()


class ParticipantRow(Base):
    __tablename__ = "participants"
    # AUTOINCREMENT keeps seq strictly increasing, so seq order is insertion order.
    __table_args__ = {"sqlite_autoincrement": True}

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    txid: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    entry_code: Mapped[str] = mapped_column(String, nullable=False)
    address: Mapped[str] = mapped_column(String, nullable=False)
    amount: Mapped[str] = mapped_column(String, nullable=False)
    validated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


def _database_url(path_or_url: str) -> str:
    if "://" in path_or_url:
        return path_or_url
    return f"sqlite:///{path_or_url}"


def _create_engine(url: str):
    connect_args: dict[str, object] = {}
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite":
        connect_args["check_same_thread"] = False
        connect_args["timeout"] = 30
        database = parsed.database
        if database and database != ":memory:":
            Path(database).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(url, future=True, connect_args=connect_args)


class ParticipantLedger:
    """
    Append-only store of accepted participations.

    Order: records are returned by ascending seq, i.e. insertion order. The
    draw depends on this order.
    Uniqueness: the txid column carries a UNIQUE constraint, so concurrent
    inserts of one transaction id leave exactly one row.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        self.engine = _create_engine(_database_url(path))
        Base.metadata.create_all(bind=self.engine)
        self._sessions = sessionmaker(bind=self.engine, future=True)

    def close(self) -> None:
        self.engine.dispose()

    def insert(self, participant: Participant) -> None:
        row = ParticipantRow(
            txid=participant.txid,
            entry_code=participant.entry_code,
            address=participant.address,
            amount=format_amount(participant.amount),
            validated=participant.validated,
        )
        with self._sessions() as session:
            session.add(row)
            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                raise DuplicateTransaction(
                    f"Transaction {participant.txid} already recorded"
                ) from e
        log.debug("Recorded %s in %s", participant.txid, self.path)

    def validated_participants(self) -> List[Participant]:
        query = (
            select(ParticipantRow)
            .where(ParticipantRow.validated.is_(True))
            .order_by(ParticipantRow.seq)
        )
        with self._sessions() as session:
            rows = session.execute(query).scalars().all()
            return [
                Participant(
                    entry_code=r.entry_code,
                    txid=r.txid,
                    address=r.address,
                    amount=parse_amount(r.amount),
                    validated=r.validated,
                )
                for r in rows
            ]
