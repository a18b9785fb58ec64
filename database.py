# database.py

from flask_sqlalchemy import SQLAlchemy

# Initialize Flask SQLAlchemy; bound to an app by app.create_app()
db = SQLAlchemy()
