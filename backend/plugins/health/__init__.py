"""Liveness check reporting whether the key-value store answers."""

PLUGIN_METADATA = {
    "endpoints": [
        "GET  /api/health - Health check",
    ],
}
