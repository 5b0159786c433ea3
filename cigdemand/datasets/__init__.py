from . import cigarettes_sw

__all__ = ["cigarettes_sw"]
