from __future__ import annotations

from ..models import Pair, Raffle


def raffle_list_item(raffle: Raffle, user_id: int) -> dict:
    return {
        "id": raffle.id,
        "name": raffle.name,
        "isOwner": raffle.owner_id == user_id,
        "finished": raffle.finished,
    }


def raffle_details(pair: Pair, user_id: int) -> dict:
    """
    Detail view of a raffle as seen by the giver of `pair`.

    The join key is only shown to the owner; the match only once the raffle
    is finished.
    """
    raffle = pair.raffle
    details = raffle_list_item(raffle, user_id)
    details["pairsCount"] = len(raffle.pairs)

    if details["isOwner"]:
        details["raffleKey"] = raffle.join_key
    if raffle.finished and pair.receiver is not None:
        details["yourMatch"] = pair.receiver.name
    return details
