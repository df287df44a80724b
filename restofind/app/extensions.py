from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

# Singletons (initialized in app factory)
db = SQLAlchemy()
migrate = Migrate()
