from .routes import status_bp

__all__ = ["status_bp"]
