"""Development JSON collection server for FleetTrack."""

import json
import logging
import os

import click
from flask import Flask, jsonify, request
from flask_cors import CORS

logger = logging.getLogger(__name__)

COLLECTIONS = ("vehicles", "departments", "trips")

REQUIRED_FIELDS = {
    "vehicles": ("id", "name", "number_plate", "fuel_capacity"),
    "departments": ("id", "name", "code"),
    "trips": ("id", "vehicle_id", "user_id", "start_time", "status"),
}

TRIP_STATUSES = ("active", "completed", "cancelled")


def validate_item(collection, item, items):
    """
    Check a record before it is written to ``collection``.

    ``items`` are the records already stored, minus the one being replaced.

    Returns:
        tuple: (error message, HTTP status) or None when the record is valid
    """
    if not isinstance(item, dict):
        return "Request body must be a JSON object", 400

    missing = [name for name in REQUIRED_FIELDS[collection] if item.get(name) in (None, "")]
    if missing:
        return f"Missing required fields: {', '.join(missing)}", 400

    if any(str(other.get("id")) == str(item["id"]) for other in items):
        return f"Item with ID '{item['id']}' already exists in '{collection}'", 409

    if collection == "trips":
        if item["status"] not in TRIP_STATUSES:
            return f"Unknown trip status '{item['status']}'", 400
        if item["status"] == "active" and any(
                other.get("vehicle_id") == item["vehicle_id"] and other.get("status") == "active"
                for other in items):
            return f"Vehicle {item['vehicle_id']} already has an active trip", 409

    return None


def create_app(db_file: str) -> Flask:
    """Build the Flask app serving the collections stored in ``db_file``."""
    app = Flask(__name__)
    CORS(app)

    def read_db():
        """Read the database from the JSON file."""
        with open(db_file, 'r') as f:
            return json.load(f)

    def write_db(data):
        """Write data to the JSON file."""
        with open(db_file, 'w') as f:
            json.dump(data, f, indent=2)

    @app.route('/')
    def get_root():
        """Get the entire database."""
        return jsonify(read_db())

    @app.route('/<collection>', methods=['GET', 'POST'])
    def manage_collection(collection):
        """Get all items or add a new item to a collection."""
        db = read_db()

        if collection not in COLLECTIONS or collection not in db:
            return jsonify({"error": f"Collection '{collection}' not found"}), 404

        if request.method == 'GET':
            return jsonify(db[collection])

        new_item = request.get_json(silent=True)
        error = validate_item(collection, new_item, db[collection])
        if error:
            message, status = error
            logger.warning(f"Rejected POST /{collection}: {message}")
            return jsonify({"error": message}), status

        db[collection].append(new_item)
        write_db(db)
        return jsonify(new_item), 201

    @app.route('/<collection>/query', methods=['GET'])
    def query_collection(collection):
        """Query items in a collection by exact field values."""
        db = read_db()

        if collection not in COLLECTIONS or collection not in db:
            return jsonify({"error": f"Collection '{collection}' not found"}), 404

        filtered_items = [
            item for item in db[collection]
            if all(key in item and str(item[key]) == value for key, value in request.args.items())
        ]
        return jsonify(filtered_items)

    @app.route('/<collection>/<item_id>', methods=['GET', 'PUT', 'DELETE'])
    def manage_item(collection, item_id):
        """Get, update or delete a specific item."""
        db = read_db()

        if collection not in COLLECTIONS or collection not in db:
            return jsonify({"error": f"Collection '{collection}' not found"}), 404

        item_index = next(
            (i for i, item in enumerate(db[collection]) if str(item.get('id')) == str(item_id)),
            None,
        )
        if item_index is None:
            return jsonify({"error": f"Item with ID '{item_id}' not found in '{collection}'"}), 404

        if request.method == 'GET':
            return jsonify(db[collection][item_index])

        if request.method == 'PUT':
            updated_item = request.get_json(silent=True)
            others = db[collection][:item_index] + db[collection][item_index + 1:]
            error = validate_item(collection, updated_item, others)
            if error is None and str(updated_item["id"]) != str(item_id):
                error = f"Item ID '{updated_item['id']}' does not match URL ID '{item_id}'", 400
            if error:
                message, status = error
                logger.warning(f"Rejected PUT /{collection}/{item_id}: {message}")
                return jsonify({"error": message}), status

            db[collection][item_index] = updated_item
            write_db(db)
            return jsonify(updated_item)

        deleted_item = db[collection].pop(item_index)
        write_db(db)
        return jsonify(deleted_item)

    return app


def ensure_db(db_file: str) -> None:
    """Create an empty database file when none exists."""
    directory = os.path.dirname(db_file)
    if directory:
        os.makedirs(directory, exist_ok=True)
    if not os.path.exists(db_file):
        logger.info(f"Creating empty database file at {db_file}")
        with open(db_file, 'w') as f:
            json.dump({name: [] for name in COLLECTIONS}, f, indent=2)


@click.command()
@click.option('--port', default=3000, show_default=True, help='Port to run the server on')
@click.option('--host', default='127.0.0.1', show_default=True, help='Interface to bind')
@click.option('--db', 'db_file', default=os.path.join('data', 'db.json'), show_default=True,
              help='Path to the JSON database file')
@click.option('--debug/--no-debug', default=False, help='Run Flask in debug mode')
def cli(port, host, db_file, debug):
    """Run the FleetTrack development JSON server."""
    logging.basicConfig(level=logging.INFO)
    ensure_db(db_file)

    click.echo(f"Starting JSON server on {host}:{port}...")
    click.echo(f"Using database: {db_file}")
    create_app(db_file).run(debug=debug, host=host, port=port)


if __name__ == '__main__':
    cli()
