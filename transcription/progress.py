import logging
from enum import Enum
from typing import Callable, Optional

from utils.math import clamp

logger = logging.getLogger(__name__)


class ProgressStage(str, Enum):
    UPLOAD = "upload"
    EXTRACT = "extract"
    TRANSCRIBE = "transcribe"
    ANALYZE = "analyze"
    COMPLETE = "complete"


ProgressCallback = Callable[[str, int, str], None]


class ProgressReporter:
    """
    Forwards checkpoints to an optional callback.

    Percentages never go backwards, and a failing callback is logged and
    ignored; progress is observability only.
    """

    def __init__(self, callback: Optional[ProgressCallback] = None):
        self.callback = callback
        self.last_percent = 0

    def report(self, stage: ProgressStage, percent: float, message: str = "") -> None:
        value = max(int(clamp(percent, 0, 100)), self.last_percent)
        self.last_percent = value
        logger.debug("Progress %s %d%% %s", stage.value, value, message)
        if self.callback is None:
            return
        try:
            self.callback(stage.value, value, message)
        except Exception:
            logger.warning("Progress callback failed at %s %d%%", stage.value, value, exc_info=True)
