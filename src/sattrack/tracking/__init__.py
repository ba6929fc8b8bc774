"""Real-time tracking: position buffer, controller and pass-state glue"""

from .buffer import PositionBuffer
from .controller import TrackingController, TrackingState
from .coordinator import TrackingCoordinator
from .status import PassStatus, pass_status

__all__ = ["PositionBuffer", "TrackingController", "TrackingState", "TrackingCoordinator", "PassStatus", "pass_status"]
