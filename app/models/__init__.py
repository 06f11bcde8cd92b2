from app.models.share import Share, ShareStatus

__all__ = ["Share", "ShareStatus"]
