"""
Admin Blueprint - Content management API
Handles: CRUD for every portfolio entity, Moderation, Uploads, Password change
"""

from flask import Blueprint

admin_bp = Blueprint('admin', __name__, url_prefix='/api/admin')

from . import routes
