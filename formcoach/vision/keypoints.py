"""Keypoint data model: joints, landmarks and immutable per-frame snapshots."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Tuple, Union

import numpy as np

from formcoach.core.errors import ConfigurationError

VISIBILITY_THRESHOLD = 0.5
EXTRACTION_THRESHOLD = 0.1


class Joint(IntEnum):
    """MediaPipe pose landmark indices (33 joints)."""

    NOSE = 0
    LEFT_EYE_INNER = 1
    LEFT_EYE = 2
    LEFT_EYE_OUTER = 3
    RIGHT_EYE_INNER = 4
    RIGHT_EYE = 5
    RIGHT_EYE_OUTER = 6
    LEFT_EAR = 7
    RIGHT_EAR = 8
    MOUTH_LEFT = 9
    MOUTH_RIGHT = 10
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_ELBOW = 13
    RIGHT_ELBOW = 14
    LEFT_WRIST = 15
    RIGHT_WRIST = 16
    LEFT_PINKY = 17
    RIGHT_PINKY = 18
    LEFT_INDEX = 19
    RIGHT_INDEX = 20
    LEFT_THUMB = 21
    RIGHT_THUMB = 22
    LEFT_HIP = 23
    RIGHT_HIP = 24
    LEFT_KNEE = 25
    RIGHT_KNEE = 26
    LEFT_ANKLE = 27
    RIGHT_ANKLE = 28
    LEFT_HEEL = 29
    RIGHT_HEEL = 30
    LEFT_FOOT_INDEX = 31
    RIGHT_FOOT_INDEX = 32

    @property
    def key(self) -> str:
        """snake_case name used in JSON payloads ("left_shoulder")."""
        return self.name.lower()

    @classmethod
    def from_name(cls, name: Union[str, "Joint"]) -> "Joint":
        """Resolve ``left_shoulder``, ``leftShoulder`` or ``LEFT_SHOULDER``."""
        if isinstance(name, Joint):
            return name
        snake = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", str(name).strip()).upper()
        try:
            return cls[snake]
        except KeyError:
            raise ConfigurationError(f"unknown joint: {name!r}") from None


JOINT_COUNT = len(Joint)

POSTURAL_JOINTS: Tuple[Joint, ...] = (
    Joint.LEFT_SHOULDER,
    Joint.RIGHT_SHOULDER,
    Joint.LEFT_HIP,
    Joint.RIGHT_HIP,
    Joint.LEFT_KNEE,
    Joint.RIGHT_KNEE,
)

# Joints reported by body-pose extractors that lack hands and feet.
CANONICAL_JOINTS: Tuple[Joint, ...] = POSTURAL_JOINTS + (
    Joint.LEFT_ELBOW,
    Joint.RIGHT_ELBOW,
    Joint.LEFT_WRIST,
    Joint.RIGHT_WRIST,
    Joint.LEFT_ANKLE,
    Joint.RIGHT_ANKLE,
    Joint.NOSE,
    Joint.LEFT_EYE,
    Joint.RIGHT_EYE,
    Joint.LEFT_EAR,
    Joint.RIGHT_EAR,
)


@dataclass(frozen=True)
class Landmark:
    x: float
    y: float
    z: float = 0.0
    confidence: float = 1.0

    def __post_init__(self) -> None:
        if not 0.0 <= float(self.confidence) <= 1.0:
            raise ConfigurationError(f"confidence out of range: {self.confidence}")

    @property
    def visible(self) -> bool:
        return self.confidence > VISIBILITY_THRESHOLD

    def is_visible(self, threshold: float = VISIBILITY_THRESHOLD) -> bool:
        return self.confidence > threshold


LandmarkLike = Union[Landmark, Tuple[float, ...], Mapping[str, Any]]


def _to_landmark(value: LandmarkLike) -> Landmark:
    if isinstance(value, Landmark):
        return value
    if isinstance(value, Mapping):
        conf = value.get("confidence", value.get("score", value.get("visibility", 1.0)))
        return Landmark(
            x=float(value["x"]),
            y=float(value["y"]),
            z=float(value.get("z") or 0.0),
            confidence=float(conf),
        )
    vals = [float(v) for v in value]
    if len(vals) == 3:  # x, y, confidence (2D detectors)
        return Landmark(x=vals[0], y=vals[1], confidence=vals[2])
    if len(vals) == 4:
        return Landmark(x=vals[0], y=vals[1], z=vals[2], confidence=vals[3])
    raise ConfigurationError(f"cannot build landmark from {value!r}")


@dataclass(frozen=True)
class KeypointFrame:
    """Immutable partial mapping Joint -> Landmark, indexed by joint ordinal."""

    landmarks: Tuple[Optional[Landmark], ...] = field(default=(None,) * JOINT_COUNT)
    timestamp: Optional[float] = None

    def __post_init__(self) -> None:
        if len(self.landmarks) != JOINT_COUNT:
            raise ConfigurationError(
                f"expected {JOINT_COUNT} landmark slots, got {len(self.landmarks)}"
            )

    # --- Constructors ---------------------------------------------------

    @classmethod
    def from_landmarks(
        cls,
        landmarks: Mapping[Union[str, Joint], LandmarkLike],
        timestamp: Optional[float] = None,
    ) -> "KeypointFrame":
        slots: list[Optional[Landmark]] = [None] * JOINT_COUNT
        for name, value in landmarks.items():
            if value is None:
                continue
            slots[Joint.from_name(name)] = _to_landmark(value)
        return cls(landmarks=tuple(slots), timestamp=timestamp)

    @classmethod
    def from_detections(
        cls,
        points: Union[Mapping[Union[str, Joint], LandmarkLike], Iterable[Any]],
        min_confidence: float = EXTRACTION_THRESHOLD,
        timestamp: Optional[float] = None,
    ) -> "KeypointFrame":
        """Build a frame from raw detector output, dropping low-confidence points.

        ``points`` is either a mapping of joint name to landmark data or an
        iterable of joint records carrying ``name, x, y, z, score``.
        """
        if isinstance(points, Mapping):
            items = list(points.items())
        else:
            items = []
            for p in points:
                if isinstance(p, Mapping):
                    items.append((p["name"], p))
                else:
                    items.append(
                        (p.name, {"x": p.x, "y": p.y, "z": getattr(p, "z", 0.0), "score": p.score})
                    )
        kept: Dict[Union[str, Joint], Landmark] = {}
        for name, value in items:
            lm = _to_landmark(value)
            if lm.confidence > min_confidence:
                kept[name] = lm
        return cls.from_landmarks(kept, timestamp=timestamp)

    # --- Access ---------------------------------------------------------

    def get(self, joint: Union[str, Joint]) -> Optional[Landmark]:
        return self.landmarks[Joint.from_name(joint)]

    def __getitem__(self, joint: Union[str, Joint]) -> Optional[Landmark]:
        return self.get(joint)

    def __contains__(self, joint: object) -> bool:
        if not isinstance(joint, (str, Joint)):
            return False
        return self.get(joint) is not None

    def present(self) -> Iterator[Tuple[Joint, Landmark]]:
        for joint in Joint:
            lm = self.landmarks[joint]
            if lm is not None:
                yield joint, lm

    def __len__(self) -> int:
        return sum(1 for lm in self.landmarks if lm is not None)

    def visible(self, joint: Union[str, Joint], threshold: float = VISIBILITY_THRESHOLD) -> bool:
        lm = self.get(joint)
        return lm is not None and lm.is_visible(threshold)

    def count_visible(
        self, joints: Iterable[Joint] = POSTURAL_JOINTS, threshold: float = VISIBILITY_THRESHOLD
    ) -> int:
        return sum(1 for j in joints if self.visible(j, threshold))

    def as_array(self) -> np.ndarray:
        """Return a ``(33, 4)`` array of x, y, z, confidence; absent rows are NaN."""
        arr = np.full((JOINT_COUNT, 4), np.nan, dtype=np.float64)
        for joint, lm in self.present():
            arr[joint] = (lm.x, lm.y, lm.z, lm.confidence)
        return arr

    def to_dict(self) -> Dict[str, Dict[str, float]]:
        return {
            joint.key: {"x": lm.x, "y": lm.y, "z": lm.z, "confidence": lm.confidence}
            for joint, lm in self.present()
        }
