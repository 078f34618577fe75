from .health import health_bp
from .booking import booking_bp
from .grounds import ground_bp
from .admin import admin_bp
