# smartsplit/expenses/routes.py

from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity

from smartsplit.core import BalanceService, ExpenseValidationService
from smartsplit.groups.models import Group
from smartsplit.users.model import User

expenses_bp = Blueprint("expenses", __name__)


@expenses_bp.route("/", methods=["POST"])
@jwt_required()
def add_expense():
    """
    Admit an expense after validation, then store it.

    Request body:
    {
        "group_id": "...",       // group expense; omit for a peer expense
        "friend_id": "...",      // peer expense counterparty
        "description": "Dinner",
        "amount": 100.00,
        "paid_by": "...",        // default: current user
        "participants": [...],   // group expense only; default: all members
        "split_type": "equally|percentage|amount",  // default: equally
        "distribution": {"<user_id>": 50, ...},     // required for non-equal splits
        "category": "Food",      // default: Other
        "date": "2024-01-01T10:00:00"  // default: now
    }
    """
    user_id = get_jwt_identity()
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Request body must be a JSON object"}), 400

    me = User.find_by_id(user_id)
    if not me:
        return jsonify({"error": "User not found"}), 404

    group = None
    group_id = data.get("group_id")

    if group_id:
        group = Group.find_by_id(group_id)
        if not group:
            return jsonify({"error": "Group not found"}), 404
        if not group.has_member(me.email):
            return jsonify({"error": "Not a member of this group"}), 403

        members = BalanceService.resolve_members(group, User.find_by_emails(group.members))
        known_ids = [m.id for m in members]
        participants = data.get("participants") or known_ids
    else:
        friend_id = data.get("friend_id")
        if not friend_id:
            return jsonify({"error": "Please select a friend to split the expense with."}), 400
        friend = User.find_by_id(friend_id)
        if not friend:
            return jsonify({"error": "Friend not found"}), 404
        if friend.id == me.id:
            return jsonify({"error": "You can't split an expense with yourself."}), 400

        known_ids = [me.id, friend.id]
        participants = [me.id, friend.id]

    if not isinstance(participants, list):
        return jsonify({"error": "participants must be a list"}), 400

    split, split_error = ExpenseValidationService.build_split(
        data.get("split_type"), data.get("distribution")
    )
    if split_error:
        return jsonify({"error": split_error}), 400

    expense, error = ExpenseValidationService.create_expense(
        description=data.get("description", ""),
        amount=data.get("amount"),
        paid_by=str(data.get("paid_by") or me.id),
        participants=[str(p) for p in participants],
        split=split,
        known_user_ids=known_ids,
        group_id=group.id if group else None,
        category=data.get("category"),
        date=data.get("date"),
    )
    if error:
        return jsonify({"error": error}), 400

    # Sequential writes, no rollback
    expense.insert()
    if group:
        group.expenses.append(expense.id)
        group.save()

    print(f"[EXPENSES] Added expense {expense.id} ({expense.amount:.2f}) paid by {expense.paid_by}")

    return jsonify({"expense": expense.to_dict()}), 201
