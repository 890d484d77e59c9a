# quotation_generator/models/base.py

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
