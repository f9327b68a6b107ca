from __future__ import annotations

import logging

from flask import Blueprint, jsonify
from flask_login import current_user

from ..errors import RaffleError
from ..policies import LoginRequiredMixin, error_response, json_field
from ..services.matching import MatchingImpossible
from ..services.projections import raffle_details
from ..services.raffles import raffle_service

logger = logging.getLogger(__name__)

raffles_bp = Blueprint("raffles", __name__, url_prefix="/raffles")


@raffles_bp.errorhandler(RaffleError)
def handle_raffle_error(e: RaffleError):
    return error_response(e.code, e.status_code)


@raffles_bp.errorhandler(MatchingImpossible)
def handle_matching_impossible(e: MatchingImpossible):
    logger.error("Matching engine failed: %s", e, exc_info=e)
    return error_response(e.code, 500)


class RafflesView(LoginRequiredMixin):
    def get(self):
        return jsonify(raffle_service().get_raffles_list(current_user.id))

    def post(self):
        name = json_field("name")
        if not name:
            return error_response("error.request.invalid", 400)

        raffle_id = raffle_service().create_raffle(name, current_user)
        return jsonify({"id": raffle_id}), 201


class JoinRaffleView(LoginRequiredMixin):
    def post(self):
        name = json_field("name")
        raffle_key = json_field("raffleKey")
        if not name or not raffle_key:
            return error_response("error.request.invalid", 400)

        raffle_id = raffle_service().join_raffle(name, raffle_key, current_user)
        return jsonify({"id": raffle_id})


class RaffleDetailsView(LoginRequiredMixin):
    def get(self, raffle_id: int):
        return jsonify(raffle_service().get_raffle_details(raffle_id, current_user.id))


class EndRaffleView(LoginRequiredMixin):
    def post(self, raffle_id: int):
        raffle = raffle_service().end_raffle(raffle_id, current_user)
        owner_pair = next(p for p in raffle.pairs if p.giver_id == current_user.id)
        return jsonify(raffle_details(owner_pair, current_user.id))


raffles_bp.add_url_rule("", view_func=RafflesView.as_view("raffles"), methods=["GET", "POST"])
raffles_bp.add_url_rule("/join", view_func=JoinRaffleView.as_view("join"), methods=["POST"])
raffles_bp.add_url_rule("/<int:raffle_id>", view_func=RaffleDetailsView.as_view("details"))
raffles_bp.add_url_rule("/<int:raffle_id>/end", view_func=EndRaffleView.as_view("end"), methods=["POST"])
