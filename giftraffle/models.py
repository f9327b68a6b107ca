from datetime import datetime

from flask_login import UserMixin

from .extensions import db, login_manager
from .services.keys import MAX_KEY_LENGTH


class User(UserMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), unique=True, nullable=False)

    # argon2 hash of the client-side SHA-256(passphrase)
    passkey_hash = db.Column(db.String(255), nullable=False)

    registered_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)


class Raffle(db.Model):
    __tablename__ = "raffles"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), unique=True, nullable=False)

    # Shared out-of-band by the owner; never changes after creation.
    join_key = db.Column(db.String(MAX_KEY_LENGTH), nullable=False)

    owner_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    owner = db.relationship("User", foreign_keys=[owner_id])

    finished = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    pairs = db.relationship(
        "Pair",
        back_populates="raffle",
        order_by="Pair.id",
        cascade="all, delete-orphan",
    )


class Pair(db.Model):
    """
    Participation record: giver_id gifts to receiver_id inside one raffle.

    The autoincrement id doubles as join order.
    """
    __tablename__ = "pairs"

    id = db.Column(db.Integer, primary_key=True)

    raffle_id = db.Column(db.Integer, db.ForeignKey("raffles.id", ondelete="CASCADE"), nullable=False)
    raffle = db.relationship("Raffle", back_populates="pairs")

    giver_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    giver = db.relationship("User", foreign_keys=[giver_id])

    # Stays NULL until the raffle is closed.
    receiver_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    receiver = db.relationship("User", foreign_keys=[receiver_id])

    joined_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.UniqueConstraint("raffle_id", "giver_id", name="uq_pairs_raffle_giver"),
    )


@login_manager.user_loader
def load_user(user_id: str):
    return db.session.get(User, int(user_id))
