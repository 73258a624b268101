"""Exterior viewpoint tour with optional transition videos between stops."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from masterplan.models.hierarchy import Media, MediaPurpose, MediaType

logger = logging.getLogger(__name__)

VIEWPOINT_ORDER = ["home", "point-a", "point-b"]
VIEWPOINT_LABELS: Dict[str, str] = {
    "home": "Inicio",
    "point-a": "Vista A",
    "point-b": "Vista B",
}


@dataclass
class Viewpoint:
    id: str
    label: str
    image: Optional[Media] = None


class ViewpointTour:
    """Cycle through fixed viewpoints; switches play a transition video when one exists.

    While a transition plays, further navigation requests are ignored until
    ``finish_transition`` is called.
    """

    def __init__(self, media: Sequence[Media], start: str = "home") -> None:
        if start not in VIEWPOINT_ORDER:
            raise ValueError(f"Unknown viewpoint '{start}'")
        self.media = list(media)
        self.current = start
        self.transition: Optional[Media] = None
        self._pending: Optional[str] = None

    @property
    def transitioning(self) -> bool:
        return self._pending is not None

    def viewpoints(self) -> List[Viewpoint]:
        result = []
        for vp_id in VIEWPOINT_ORDER:
            image = next(
                (m for m in self.media if m.type == MediaType.IMAGE and m.metadata.get("viewpoint") == vp_id),
                None,
            )
            result.append(Viewpoint(id=vp_id, label=VIEWPOINT_LABELS[vp_id], image=image))
        return result

    @property
    def current_image(self) -> Optional[Media]:
        return next((vp.image for vp in self.viewpoints() if vp.id == self.current), None)

    def transition_video(self, source: str, target: str) -> Optional[Media]:
        for item in self.media:
            if item.type != MediaType.VIDEO or item.purpose != MediaPurpose.TRANSITION:
                continue
            if item.metadata.get("from_viewpoint") == source and item.metadata.get("to_viewpoint") == target:
                return item
        return None

    def next_id(self) -> str:
        idx = VIEWPOINT_ORDER.index(self.current)
        return VIEWPOINT_ORDER[(idx + 1) % len(VIEWPOINT_ORDER)]

    def previous_id(self) -> str:
        idx = VIEWPOINT_ORDER.index(self.current)
        return VIEWPOINT_ORDER[(idx - 1) % len(VIEWPOINT_ORDER)]

    def navigate_to(self, target: str) -> Optional[Media]:
        """Start moving to ``target``; returns the transition video to play, if any."""
        if target not in VIEWPOINT_ORDER:
            raise ValueError(f"Unknown viewpoint '{target}'")
        if target == self.current or self.transitioning:
            return None
        video = self.transition_video(self.current, target)
        if video is None or not video.href:
            self.current = target
            return None
        logger.debug(f"Transition {self.current} -> {target} via {video.href}")
        self._pending = target
        self.transition = video
        return video

    def next(self) -> Optional[Media]:
        return self.navigate_to(self.next_id())

    def previous(self) -> Optional[Media]:
        return self.navigate_to(self.previous_id())

    def finish_transition(self) -> None:
        if self._pending is None:
            return
        self.current = self._pending
        self._pending = None
        self.transition = None
