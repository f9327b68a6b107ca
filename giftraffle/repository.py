from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload

from .errors import StorageConflict
from .extensions import db
from .models import Pair, Raffle


class RaffleRepository:
    """Storage for raffles and their pairs, on top of the Flask-SQLAlchemy session."""

    def __init__(self, session=None):
        self.session = session or db.session

    # --- reads ---

    def find_raffle_by_name(self, name: str) -> Raffle | None:
        return Raffle.query.filter_by(name=name).first()

    def find_owned_raffle(self, raffle_id: int, owner_id: int, lock: bool = False) -> Raffle | None:
        q = Raffle.query.filter_by(id=raffle_id, owner_id=owner_id)
        if lock:
            q = q.with_for_update()
        return q.first()

    def count_pairs_in_named_raffle(self, giver_id: int, raffle_name: str) -> int:
        return (
            Pair.query.join(Pair.raffle)
            .filter(Pair.giver_id == giver_id, Raffle.name == raffle_name)
            .count()
        )

    def find_pair(self, raffle_id: int, giver_id: int) -> Pair | None:
        return (
            Pair.query.options(joinedload(Pair.raffle), joinedload(Pair.receiver))
            .filter_by(raffle_id=raffle_id, giver_id=giver_id)
            .first()
        )

    def pairs_for_giver(self, giver_id: int) -> list[Pair]:
        return (
            Pair.query.options(joinedload(Pair.raffle))
            .filter_by(giver_id=giver_id)
            .order_by(Pair.id.asc())
            .all()
        )

    # --- writes ---

    def add(self, obj) -> None:
        """Insert a raffle (cascading its pairs) or a single pair and commit."""
        self.session.add(obj)
        self.commit()

    def mark_finished(self, raffle: Raffle) -> bool:
        """Flip finished false -> true. Returns False if another close already did."""
        updated = Raffle.query.filter(
            Raffle.id == raffle.id,
            Raffle.finished.is_(False),
        ).update({"finished": True}, synchronize_session=False)
        return updated == 1

    def commit(self) -> None:
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise StorageConflict(str(e.orig)) from e

    def rollback(self) -> None:
        self.session.rollback()
