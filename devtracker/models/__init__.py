"""
Development Tracker
Model registry — shared SQLAlchemy handle.

Usage:
    from devtracker.models import db
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
