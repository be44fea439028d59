from flask import Blueprint, request, jsonify
from flask_jwt_extended import create_access_token, jwt_required, get_jwt_identity

from smartsplit.users.model import User
from smartsplit.utils.validators import classify_identifier

auth_bp = Blueprint("auth", __name__)


def find_or_create_user(identifier):
    """Return the user registered under an email/mobile, creating one if absent."""
    user = User.find_by_identifier(identifier)
    if user:
        return user, False

    user = User.new_from_identifier(identifier).save()
    print(f"[AUTH] Created user {user.id} for identifier {identifier}")
    return user, True


@auth_bp.route("/login", methods=["POST"])
def login():
    data = request.get_json(silent=True) or {}
    identifier = (data.get("identifier") or "").strip()

    if not identifier:
        return jsonify({"error": "Email or Mobile Number is required."}), 400

    if classify_identifier(identifier) is None:
        return jsonify({"error": "Please enter a valid email or a 10-digit mobile number."}), 400

    user, created = find_or_create_user(identifier)
    token = create_access_token(identity=user.id)

    return jsonify({
        "access_token": token,
        "created": created,
        "user": user.to_dict()
    }), 201 if created else 200


@auth_bp.route("/me", methods=["GET"])
@jwt_required()
def me():
    user = User.find_by_id(get_jwt_identity())

    if not user:
        return jsonify({"error": "User not found"}), 404

    return jsonify(user.to_dict())
