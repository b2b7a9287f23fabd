from enum import Enum, auto

# Setting the status of the mouse on the polygon canvas
class MouseStatus(Enum):
    IDLE = auto()
    DRAW_POLY = auto()

# The pages of the main window, value = index in the page stack
class Page(Enum):
    LANDING = 0
    DOWNSCALE = 1
    RESTORE = 2
