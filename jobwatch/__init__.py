"""jobwatch: scheduled job-posting ingestion, matching and alert fan-out."""

__version__ = "0.1.0"
