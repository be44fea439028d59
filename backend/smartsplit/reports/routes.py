from flask import Blueprint, current_app, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity

from smartsplit.core import ActivityService
from smartsplit.expenses.models import Expense
from smartsplit.groups.models import Group
from smartsplit.services.gemini_summary import get_summary_service
from smartsplit.users.model import User

reports_bp = Blueprint("reports", __name__)


@reports_bp.route("/activity", methods=["GET"])
@jwt_required()
def activity():
    """Every expense involving the current user, most recent first."""
    me = User.find_by_id(get_jwt_identity())
    if not me:
        return jsonify({"error": "User not found"}), 404

    expenses = ActivityService.activity_for(me.id, Expense.find_involving(me.id))
    return jsonify({"activities": [e.to_dict() for e in expenses]})


@reports_bp.route("/summary", methods=["GET"])
@jwt_required()
def summary():
    """AI-generated markdown summary of the user's group spending."""
    me = User.find_by_id(get_jwt_identity())
    if not me:
        return jsonify({"error": "User not found"}), 404

    groups = Group.find_for_member(me.email)
    group_ids = [g.id for g in groups]
    expenses = [e for gid in group_ids for e in Expense.find_for_group(gid)]
    member_emails = {email for g in groups for email in g.members}
    users = User.find_by_emails(member_emails)

    report_data = ActivityService.report_data(me.email, users, groups, expenses)

    service = get_summary_service(
        api_key=current_app.config.get("GEMINI_API_KEY"),
        model=current_app.config.get("GEMINI_MODEL", "gemini-2.5-flash")
    )
    return jsonify({
        "summary": service.generate_report_summary(me.email, report_data),
        "groups": len(report_data)
    })
