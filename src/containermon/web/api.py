"""
REST API endpoints for container monitor status.
"""

from flask import Blueprint, g, jsonify

from containermon.core.models import MonitorEntry

api_bp = Blueprint("api", __name__)


def entry_to_dict(entry: MonitorEntry) -> dict:
    """Convert a monitor entry to a JSON-serializable dict."""
    return {
        "id": entry.container_id,
        "name": entry.name,
        "state": entry.state.value,
        "failures": entry.failures,
        "counter": entry.counter,
        "healthy": entry.last_healthy,
        "first_seen": entry.first_seen.isoformat(),
    }


@api_bp.route("/health", methods=["GET"])
def health():
    """Report monitor liveness and the outcome of the last cycle."""
    daemon = g.daemon
    return jsonify({
        "status": "ok" if daemon.last_error is None else "error",
        "containers": len(daemon.store),
        "last_cycle": daemon.last_cycle.isoformat() if daemon.last_cycle else None,
        "last_error": daemon.last_error,
    })


@api_bp.route("/containers", methods=["GET"])
def list_containers():
    """List tracked containers and their failure state."""
    entries = g.daemon.store.snapshot()
    return jsonify({
        "containers": [entry_to_dict(e) for e in entries],
        "count": len(entries),
    })


@api_bp.route("/containers/<container_id>", methods=["GET"])
def get_container(container_id: str):
    """Get one tracked container by full ID, ID prefix, or name."""
    for entry in g.daemon.store.snapshot():
        if (
            entry.container_id.startswith(container_id)
            or entry.name == container_id
        ):
            return jsonify(entry_to_dict(entry))
    return jsonify({"error": f"Container '{container_id}' not tracked"}), 404
