"""Runtime configuration: logging, error tracking and telemetry export setup."""
