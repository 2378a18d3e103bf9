"""Flask HTTP service for ambulances and their patient questionnaires, stored in MongoDB."""

__version__ = "1.0.0"