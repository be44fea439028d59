from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required, get_jwt_identity

from smartsplit.auth.routes import find_or_create_user
from smartsplit.core import ActivityService, BalanceService
from smartsplit.expenses.models import Expense
from smartsplit.groups.models import Group
from smartsplit.users.model import User
from smartsplit.utils.validators import classify_identifier

users_bp = Blueprint("users", __name__)


def related_users(me):
    """Users sharing a group with `me` plus explicit friends."""
    groups = Group.find_for_member(me.email)
    member_emails = {email for g in groups for email in g.members}
    candidates = {u.id: u for u in User.find_by_emails(member_emails)}
    for friend_id in me.friend_ids:
        if friend_id not in candidates:
            friend = User.find_by_id(friend_id)
            if friend:
                candidates[friend.id] = friend
    return groups, list(candidates.values())


def resolve_counterparties(balances, users):
    """Map counterparty ids to users; ids with no stored user are left out."""
    by_id = {u.id: u for u in users}
    for uid in balances:
        if uid not in by_id:
            friend = User.find_by_id(uid)
            if friend:
                by_id[uid] = friend
    return {uid: by_id[uid] for uid in balances if uid in by_id}


@users_bp.route("/profile", methods=["GET"])
@jwt_required()
def profile():
    user = User.find_by_id(get_jwt_identity())

    if not user:
        return jsonify({"error": "User not found"}), 404

    return jsonify(user.to_dict())


@users_bp.route("/profile", methods=["PUT"])
@jwt_required()
def update_profile():
    user = User.find_by_id(get_jwt_identity())
    if not user:
        return jsonify({"error": "User not found"}), 404

    data = request.get_json(silent=True) or {}
    name = (data.get("name") or "").strip()
    if not name:
        return jsonify({"error": "Name cannot be empty."}), 400

    user.name = name
    user.save()
    return jsonify(user.to_dict())


@users_bp.route("/friends", methods=["GET"])
@jwt_required()
def list_friends():
    """
    Peer balances with every known user, settled-up ones included.

    Returns:
    {
        "friends": [{"friend": {...}, "balance": 25.0}, ...],
        "total_balance": 25.0
    }

    Positive balance = friend owes you
    Negative balance = you owe friend
    """
    me = User.find_by_id(get_jwt_identity())
    if not me:
        return jsonify({"error": "User not found"}), 404

    try:
        groups, users = related_users(me)
        known_ids = BalanceService.compute_relationship_ids(me, users, groups)
        expenses = Expense.find_involving(me.id)
        balances = BalanceService.compute_peer_balance(me.id, expenses, known_ids)

        # Counterparties that no longer resolve to a user are not displayable
        by_id = resolve_counterparties(balances, users)
        rows = [
            {"friend": friend.to_dict(), "balance": round(balances[uid], 2)}
            for uid, friend in by_id.items()
        ]
        total = BalanceService.non_group_total(me.id, expenses, by_id.keys())
        return jsonify({
            "friends": rows,
            "total_balance": round(total, 2)
        })
    except Exception as e:
        return jsonify({"error": str(e)}), 500


@users_bp.route("/friends", methods=["POST"])
@jwt_required()
def add_friend():
    """
    Add a friend by email or 10-digit mobile number.

    Request body:
    {
        "identifier": "friend@example.com"
    }
    """
    me = User.find_by_id(get_jwt_identity())
    if not me:
        return jsonify({"error": "User not found"}), 404

    data = request.get_json(silent=True) or {}
    identifier = (data.get("identifier") or "").strip()
    if not identifier:
        return jsonify({"error": "Email or Mobile Number is required."}), 400
    if classify_identifier(identifier) is None:
        return jsonify({"error": "Please enter a valid email or a 10-digit mobile number."}), 400

    friend = User.find_by_identifier(identifier)
    if friend and friend.id == me.id:
        return jsonify({"error": "You can't add yourself as a friend."}), 400
    if friend and friend.id in me.friend_ids:
        return jsonify({"error": "This user is already your friend."}), 409

    if not friend:
        friend, _ = find_or_create_user(identifier)

    # Sequential writes, no rollback
    me.friend_ids.append(friend.id)
    me.save()
    if me.id not in friend.friend_ids:
        friend.friend_ids.append(me.id)
        friend.save()

    return jsonify({"user": me.to_dict(), "friend": friend.to_dict()}), 201


@users_bp.route("/friends/<friend_id>", methods=["GET"])
@jwt_required()
def friend_detail(friend_id):
    """Peer expenses with one friend (newest first) and the net balance."""
    me = User.find_by_id(get_jwt_identity())
    if not me:
        return jsonify({"error": "User not found"}), 404

    friend = User.find_by_id(friend_id)
    if not friend:
        return jsonify({"error": "Friend not found"}), 404

    expenses = ActivityService.peer_expenses_between(me.id, friend.id, Expense.find_involving(me.id))
    balance = BalanceService.compute_pair_balance(me.id, friend.id, expenses)

    return jsonify({
        "friend": friend.to_dict(),
        "expenses": [e.to_dict() for e in expenses],
        "balance": round(balance, 2),
        "settled_up": abs(balance) < 0.01
    })
