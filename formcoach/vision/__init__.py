"""Vision package exports."""

from .keypoints import Joint, KeypointFrame, Landmark
from .scoring import Feedback, FormScore, FormScorer
from .throttle import FrameThrottle, should_process

__all__ = [
    "Joint",
    "Landmark",
    "KeypointFrame",
    "FrameThrottle",
    "should_process",
    "FormScorer",
    "FormScore",
    "Feedback",
]
