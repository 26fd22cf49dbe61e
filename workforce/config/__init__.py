from .settings import Settings, get_settings
from .security import SecurityConfig
