import os

# ✅ Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./vehiclehub.db")

# ✅ Security
SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

# ✅ Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# ✅ Subscriptions
GRACE_PERIOD_DAYS = int(os.getenv("GRACE_PERIOD_DAYS", "2"))

# ✅ Maintenance
MAINTENANCE_REFRESH_SECONDS = int(os.getenv("MAINTENANCE_REFRESH_SECONDS", "60"))
DEFAULT_MAINTENANCE_MESSAGE = os.getenv(
    "DEFAULT_MAINTENANCE_MESSAGE",
    "We are currently performing maintenance. Please check back later.",
)

# ✅ Frontend
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
    if origin.strip()
]

# ✅ Startup
RUN_MIGRATIONS = os.getenv("RUN_MIGRATIONS", "0") == "1"
