from superhitz.models.track import Track

__all__ = ["Track"]
