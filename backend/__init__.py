"""Config service: stores the dashboard conf.yml in Redis behind a small HTTP API."""
