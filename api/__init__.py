from .app import app, create_app
