from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Shared by every VehicleHub model and used as the Alembic autogenerate target.
# Models register themselves by being imported from app.db.models.
