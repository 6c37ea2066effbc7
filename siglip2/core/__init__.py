from siglip2.core.config import get_config, get_models_dir, reset_config, set_models_dir
from siglip2.core.logging import setup_logging

__all__ = ["get_config", "get_models_dir", "reset_config", "set_models_dir", "setup_logging"]
