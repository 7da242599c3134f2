"""Remote storage for the dashboard's single YAML configuration document."""

PLUGIN_METADATA = {
    "endpoints": [
        "GET  /api/config - Get the stored configuration",
        "POST /api/config - Save the configuration (API token required)",
        "POST /api/config/reset - Reset the configuration (API token required)",
        "GET  /api/config/meta - Get configuration metadata",
    ],
}
