"""
Public Blueprint - Read API for the portfolio site and visitor forms
Handles: Portfolio content, Blog, Translations, Contact form, Newsletter
"""

from flask import Blueprint

public_bp = Blueprint('public', __name__, url_prefix='/api')

from . import routes
