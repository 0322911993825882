import logging
import os
import sys
from datetime import datetime

from flask import Blueprint, Flask, current_app, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from availability import room_catalogue
from hotel_settings import Settings
from notifications import EmailNotifier
from services import (
    BookingService,
    ContactService,
    HotelError,
    NewsletterService,
)
from storage import RecordStore

logger = logging.getLogger(__name__)

api = Blueprint("hotel", __name__)


def _services():
    return current_app.extensions["hotel"]


def _payload() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


# --- Liveness probe ---
@api.route("/health", methods=["GET"])
def health():
    return jsonify(
        {
            "success": True,
            "message": "Server is running",
            "timestamp": datetime.utcnow().isoformat() + "Z",
        }
    )


@api.route("/api/rooms", methods=["GET"])
def rooms():
    return jsonify({"success": True, "data": {"rooms": room_catalogue()}})


# --- Contact form ---
@api.route("/api/contact", methods=["POST"])
def submit_contact():
    contact_id = _services()["contacts"].submit(_payload())
    return jsonify(
        {"success": True, "message": "Message sent successfully.", "data": {"id": contact_id}}
    )


# --- Booking form ---
@api.route("/api/booking", methods=["POST"])
def create_booking():
    booking = _services()["bookings"].create_booking(_payload())
    return jsonify({"success": True, "message": "Booking confirmed.", "data": booking})


@api.route("/api/booking/<reference>", methods=["GET"])
def get_booking(reference):
    booking = _services()["bookings"].find_booking(reference)
    return jsonify({"success": True, "data": booking})


@api.route("/api/availability", methods=["GET"])
def get_availability():
    availability = _services()["bookings"].availability(
        request.args.get("checkIn", ""), request.args.get("checkOut", "")
    )
    return jsonify({"success": True, "data": {"availability": availability}})


# --- Newsletter signup ---
@api.route("/api/newsletter", methods=["POST"])
def subscribe_newsletter():
    _services()["newsletter"].subscribe(_payload().get("email"))
    return jsonify({"success": True, "message": "Successfully subscribed!"})


def _hotel_error(error: HotelError):
    return jsonify({"success": False, "message": error.message}), error.status_code


def _http_error(error: HTTPException):
    return jsonify({"success": False, "message": error.description}), error.code


def _server_error(error: Exception):
    current_app.logger.exception("Unhandled error on %s %s", request.method, request.path)
    return jsonify({"success": False, "message": "Server error."}), 500


def create_app(settings=None, notifier=None):
    settings = settings or Settings.from_env()
    store = RecordStore(settings.data_dir)
    notifier = notifier or EmailNotifier(settings.smtp)

    try:
        store.ensure_files()
    except OSError:
        logger.exception("Error initializing data in %s", settings.data_dir)

    app = Flask(__name__)
    app.config["HOTEL_SETTINGS"] = settings
    app.extensions["hotel"] = {
        "store": store,
        "notifier": notifier,
        "bookings": BookingService(store, notifier),
        "contacts": ContactService(store, notifier),
        "newsletter": NewsletterService(store, notifier),
    }

    origins = "*" if "*" in settings.cors_origins else list(settings.cors_origins)
    CORS(app, resources={r"/*": {"origins": origins}})

    app.register_blueprint(api)
    app.register_error_handler(HotelError, _hotel_error)
    app.register_error_handler(HTTPException, _http_error)
    app.register_error_handler(Exception, _server_error)
    return app


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    settings = Settings.from_env()
    # Use the configured port unless one is given on the command line
    port = int(sys.argv[1]) if len(sys.argv) > 1 else settings.port
    app = create_app(settings)
    logger.info("Kaskady hotel server on http://localhost:%s (storage: %s)", port, settings.data_dir)
    app.run(host="0.0.0.0", port=port, debug=os.getenv("FLASK_DEBUG") == "1")
