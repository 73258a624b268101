"""In-memory navigation history for one project."""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from masterplan.hierarchy.resolver import build_href

logger = logging.getLogger(__name__)


class Navigator:
    """History stack of slug paths; each entry maps to ``/<prefix>/<project>/<path...>``."""

    def __init__(
        self,
        project_slug: str,
        initial_path: Sequence[str] = (),
        route_prefix: Optional[str] = None,
    ) -> None:
        self.project_slug = project_slug
        self.route_prefix = route_prefix
        self.history: List[List[str]] = [list(initial_path)]

    @property
    def current(self) -> List[str]:
        return list(self.history[-1])

    @property
    def current_href(self) -> str:
        return self.href(self.history[-1])

    def href(self, path: Sequence[str]) -> str:
        return build_href(self.project_slug, path, self.route_prefix)

    def push(self, path: Sequence[str]) -> str:
        self.history.append(list(path))
        logger.debug(f"push {self.current_href}")
        return self.current_href

    def replace(self, path: Sequence[str]) -> str:
        """Swap the current entry without growing the history."""
        self.history[-1] = list(path)
        logger.debug(f"replace {self.current_href}")
        return self.current_href

    def back(self) -> bool:
        if len(self.history) <= 1:
            return False
        self.history.pop()
        return True

    def __len__(self) -> int:
        return len(self.history)
