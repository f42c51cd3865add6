"""Version range handling for engines that pick versions themselves."""

from .ranges import filter_by_range, is_range, pick_version

__all__ = ["filter_by_range", "is_range", "pick_version"]
