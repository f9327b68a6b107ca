from __future__ import annotations

import logging

from flask import current_app

from ..errors import (
    AlreadyFinished,
    AlreadyJoined,
    CannotClose,
    NameTaken,
    NotFound,
    OwnedNotFound,
    StorageConflict,
)
from ..models import Pair, Raffle, User
from ..repository import RaffleRepository
from .keys import DEFAULT_KEY_LENGTH, generate_join_key, join_keys_match
from .matching import Chooser, MatchingImpossible, match
from .projections import raffle_details, raffle_list_item

logger = logging.getLogger(__name__)

DEFAULT_MATCH_ATTEMPTS = 25


class RaffleService:
    def __init__(
        self,
        repository: RaffleRepository | None = None,
        choose: Chooser | None = None,
        key_length: int = DEFAULT_KEY_LENGTH,
        match_attempts: int = DEFAULT_MATCH_ATTEMPTS,
    ):
        self.repository = repository or RaffleRepository()
        self.choose = choose
        self.key_length = key_length
        self.match_attempts = max(1, match_attempts)

    # --- commands ---

    def create_raffle(self, name: str, owner: User) -> int:
        raffle = Raffle(
            name=name,
            join_key=generate_join_key(self.key_length),
            owner=owner,
            finished=False,
            pairs=[Pair(giver=owner)],
        )
        try:
            self.repository.add(raffle)
        except StorageConflict as e:
            raise NameTaken(f"Raffle name {name!r} is taken.") from e

        logger.info("Raffle %s (%r) created by user %s", raffle.id, name, owner.id)
        return raffle.id

    def join_raffle(self, name: str, join_key: str, user: User) -> int:
        if self.repository.count_pairs_in_named_raffle(user.id, name):
            raise AlreadyJoined()

        raffle = self.repository.find_raffle_by_name(name)
        if raffle is None or not join_keys_match(join_key, raffle.join_key):
            raise NotFound()

        if raffle.finished:
            raise AlreadyFinished()

        try:
            self.repository.add(Pair(giver=user, raffle=raffle))
        except StorageConflict as e:
            # lost a race against a concurrent join of the same user
            raise AlreadyJoined() from e

        logger.info("User %s joined raffle %s", user.id, raffle.id)
        return raffle.id

    def end_raffle(self, raffle_id: int, user: User) -> Raffle:
        raffle = self.repository.find_owned_raffle(raffle_id, user.id, lock=True)
        if raffle is None:
            raise OwnedNotFound()

        if raffle.finished:
            raise AlreadyFinished()

        if len(raffle.pairs) < 2:
            raise CannotClose()

        try:
            self._match_pairs(raffle)
            if not self.repository.mark_finished(raffle):
                self.repository.rollback()
                raise AlreadyFinished()
            self.repository.commit()
        except MatchingImpossible:
            self.repository.rollback()
            raise

        logger.info("Raffle %s closed with %d pairs", raffle.id, len(raffle.pairs))
        return raffle

    def _match_pairs(self, raffle: Raffle) -> None:
        pairs = list(raffle.pairs)
        for attempt in range(1, self.match_attempts + 1):
            try:
                raffle.pairs = match(pairs, self.choose)
                return
            except MatchingImpossible:
                if attempt == self.match_attempts:
                    logger.error(
                        "Matching raffle %s failed after %d attempts", raffle.id, attempt
                    )
                    raise
                logger.warning("Matching raffle %s dead-ended (attempt %d)", raffle.id, attempt)

    # --- queries ---

    def get_raffles_list(self, user_id: int) -> list[dict]:
        return [raffle_list_item(p.raffle, user_id) for p in self.repository.pairs_for_giver(user_id)]

    def get_raffle_details(self, raffle_id: int, user_id: int) -> dict:
        pair = self.repository.find_pair(raffle_id, user_id)
        if pair is None:
            raise NotFound()
        return raffle_details(pair, user_id)


def raffle_service() -> RaffleService:
    """Build a service from the current app's config."""
    cfg = current_app.config
    return RaffleService(
        key_length=cfg.get("RAFFLE_JOIN_KEY_LENGTH", DEFAULT_KEY_LENGTH),
        match_attempts=cfg.get("RAFFLE_MATCH_ATTEMPTS", DEFAULT_MATCH_ATTEMPTS),
    )
