from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity
from bson import ObjectId

from smartsplit.auth.routes import find_or_create_user
from smartsplit.core import ActivityService, BalanceService, SettlementPlanner, TOLERANCE
from smartsplit.expenses.models import Expense
from smartsplit.groups.models import Group
from smartsplit.users.model import User
from smartsplit.users.routes import related_users, resolve_counterparties

groups_bp = Blueprint("groups", __name__)


# ------------------ HELPERS ------------------

def load_group_for(user_id, group_id):
    """Return (user, group, error_response)."""
    me = User.find_by_id(user_id)
    if not me:
        return None, None, (jsonify({"error": "User not found"}), 404)

    group = Group.find_by_id(group_id)
    if not group:
        return me, None, (jsonify({"error": "Group not found"}), 404)

    if not group.has_member(me.email):
        return me, group, (jsonify({"error": "Not a member of this group"}), 403)

    return me, group, None


def group_snapshot(group):
    members = User.find_by_emails(group.members)
    # Keep the group's member order
    order = {email: i for i, email in enumerate(group.members)}
    members.sort(key=lambda u: order.get(u.email, len(order)))
    expenses = Expense.find_for_group(group.id)
    return members, expenses


def balances_payload(group, members, expenses):
    balances = BalanceService.compute_group_balances(group, members, expenses)
    settlements = SettlementPlanner.plan(balances)
    by_id = {m.id: m for m in members}
    return {
        "balances": [
            {
                "user_id": uid,
                "name": by_id[uid].display_name,
                "balance": round(balance, 2),
                "settled": abs(balance) < TOLERANCE
            }
            for uid, balance in balances.items()
        ],
        "settlements": SettlementPlanner.describe(settlements, members),
    }


# ------------------ ROUTES ------------------

@groups_bp.route("/", methods=["GET"])
@jwt_required()
def list_groups():
    """Groups the current user belongs to, plus the overall non-group balance."""
    me = User.find_by_id(get_jwt_identity())
    if not me:
        return jsonify({"error": "User not found"}), 404

    groups = Group.find_for_member(me.email)
    expenses = Expense.find_involving(me.id)
    _, users = related_users(me)
    counterparties = resolve_counterparties(
        BalanceService.compute_peer_balance(me.id, expenses), users
    )
    non_group_balance = BalanceService.non_group_total(me.id, expenses, counterparties.keys())

    return jsonify({
        "groups": [g.to_dict() for g in groups],
        "non_group_balance": round(non_group_balance, 2)
    })


@groups_bp.route("/", methods=["POST"])
@jwt_required()
def create_group():
    """
    Create a group from member identifiers; unknown identifiers become users.

    Request body:
    {
        "name": "Goa trip",
        "members": ["a@example.com", "9876543210"]
    }
    """
    me = User.find_by_id(get_jwt_identity())
    if not me:
        return jsonify({"error": "User not found"}), 404

    data = request.get_json(silent=True) or {}
    name = (data.get("name") or "").strip()
    if not name:
        return jsonify({"error": "Group name cannot be empty."}), 400

    identifiers = data.get("members") or []
    if not isinstance(identifiers, list):
        return jsonify({"error": "members must be a list"}), 400

    member_emails = [me.email] if me.email else []
    member_ids = {me.id}
    created = []

    for identifier in identifiers:
        identifier = (identifier or "").strip() if isinstance(identifier, str) else ""
        if not identifier:
            continue
        user, was_created = find_or_create_user(identifier)
        if was_created:
            created.append(user.to_dict())
        if user.id in member_ids:
            continue
        member_ids.add(user.id)
        # Membership is by email; mobile-only users are not listed
        if user.email and user.email not in member_emails:
            member_emails.append(user.email)

    group = Group(
        id=str(ObjectId()),
        name=name,
        members=member_emails,
        expenses=[],
        created_by=me.id
    ).save()
    print(f"[GROUPS] Created group {group.id} with {len(member_emails)} members")

    return jsonify({"group": group.to_dict(), "created_users": created}), 201


@groups_bp.route("/<group_id>", methods=["GET"])
@jwt_required()
def get_group(group_id):
    """Group detail: members, expenses (newest first), balances and settlements."""
    _, group, error = load_group_for(get_jwt_identity(), group_id)
    if error:
        return error

    try:
        members, expenses = group_snapshot(group)
        payload = balances_payload(group, members, expenses)
        payload.update({
            "group": group.to_dict(),
            "members": [m.to_dict() for m in members],
            "expenses": [e.to_dict() for e in ActivityService.newest_first(expenses)],
        })
        return jsonify(payload)
    except Exception as e:
        return jsonify({"error": str(e)}), 500


@groups_bp.route("/<group_id>/balances", methods=["GET"])
@jwt_required()
def get_group_balances(group_id):
    """
    Balances and suggested settlements for a group.

    Returns:
    {
        "balances": [{"user_id": "...", "name": "alice", "balance": 50.0, "settled": false}],
        "settlements": [{"from_user": "...", "from_name": "bob", "to_user": "...", "to_name": "alice", "amount": 50.0}]
    }
    """
    _, group, error = load_group_for(get_jwt_identity(), group_id)
    if error:
        return error

    try:
        members, expenses = group_snapshot(group)
        return jsonify(balances_payload(group, members, expenses))
    except Exception as e:
        return jsonify({"error": str(e)}), 500
