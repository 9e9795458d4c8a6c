"""Screen controllers driving the record -> transcribe -> send workflow."""

from .screens import CivilianScreen, PoliceScreen, ScreenController, ScreenState

__all__ = ["CivilianScreen", "PoliceScreen", "ScreenController", "ScreenState"]
