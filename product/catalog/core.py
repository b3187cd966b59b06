"""
Core options for the product catalog.

Contains the settings that control how input rows become catalog entities.
"""

from enum import Enum
from typing import Optional, Tuple

# Dimensions given to every wallpaper under the fixed-size policy
DEFAULT_WALLPAPER_SIZE = (1920, 1080)

# Lines whose first character is this marker are comments (or column headers)
DEFAULT_COMMENT_MARKER = "#"


class WallpaperDimensionPolicy(str, Enum):
    """Where imported wallpapers take their pixel dimensions from."""

    FIXED = "fixed"  # always the default size, whatever the row says
    PARSED = "parsed"  # the row's width/height columns, default size if absent


class ImportOptions:
    """Options that control how input files are read into the catalog."""

    def __init__(
        self,
        comment_marker: str = DEFAULT_COMMENT_MARKER,
        wallpaper_dimensions: WallpaperDimensionPolicy = WallpaperDimensionPolicy.FIXED,
        default_wallpaper_size: Tuple[int, int] = DEFAULT_WALLPAPER_SIZE,
    ):
        self.comment_marker = comment_marker
        self.wallpaper_dimensions = WallpaperDimensionPolicy(wallpaper_dimensions)
        self.default_wallpaper_size = default_wallpaper_size

    def wallpaper_size(self, parsed: Optional[Tuple[int, int]] = None) -> Tuple[int, int]:
        """
        Pick the dimensions for a wallpaper.

        Args:
            parsed: Width and height read from the row, or None if the row had none

        Returns:
            The (width, height) the wallpaper should be built with
        """
        if self.wallpaper_dimensions is WallpaperDimensionPolicy.PARSED and parsed:
            return parsed
        return self.default_wallpaper_size


def validate_access_token(token: str) -> bool:
    """
    Check that ``token`` may carry out restricted catalog operations.

    There is no authentication service yet, so any non-empty string passes.
    """
    return isinstance(token, str) and len(token) > 0
