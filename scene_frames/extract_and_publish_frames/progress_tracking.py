from enum import Enum
import logging
import threading
from typing import Callable, Dict, Optional, Union

from tqdm import tqdm

logger = logging.getLogger(__name__)


class Stage(str, Enum):
    EXTRACT = "extract"
    LIST = "list"
    PROCESS = "process"
    PUSH = "push"
    DELETE_IMAGES = "delete_images"
    DELETE_DIR = "delete_dir"


STAGE_WEIGHTS: Dict[Stage, int] = {
    Stage.EXTRACT: 20,
    Stage.LIST: 3,
    Stage.PROCESS: 55,
    Stage.PUSH: 15,
    Stage.DELETE_IMAGES: 5,
    Stage.DELETE_DIR: 2,
}


def active_weights(push_to_cloud: bool, delete_after_upload: bool = True) -> Dict[Stage, int]:
    """
    Weights of the stages a run will actually go through.

    With uploads the resize and upload of a file are one pipelined unit, so their
    weights are fused into the process stage. Without uploads nothing is deleted.
    """
    weights = {stage: STAGE_WEIGHTS[stage] for stage in (Stage.EXTRACT, Stage.LIST, Stage.PROCESS)}

    if push_to_cloud:
        weights[Stage.PROCESS] += STAGE_WEIGHTS[Stage.PUSH]

        if delete_after_upload:
            weights[Stage.DELETE_IMAGES] = STAGE_WEIGHTS[Stage.DELETE_IMAGES]
            weights[Stage.DELETE_DIR] = STAGE_WEIGHTS[Stage.DELETE_DIR]

    return weights


class ProgressTracker:
    """
    Combine per-stage completion into a single percentage.

    Dropped stages are excluded and the remaining weights rescaled so a finished run
    always reads exactly 100. A stage never moves backwards, so the total is
    non-decreasing. Safe to call from worker threads.

    Attributes:
        weights (dict): Active stages and their weights.
        on_change (Callable | None): Called with the new percentage whenever it grows.
    """

    def __init__(
        self,
        push_to_cloud: bool = False,
        delete_after_upload: bool = True,
        on_change: Optional[Callable[[float], None]] = None,
        show_bar: bool = True,
    ):
        self.push_to_cloud = push_to_cloud
        self.weights = active_weights(push_to_cloud, delete_after_upload)
        self.on_change = on_change

        self._total_weight = sum(self.weights.values())
        self._fractions = {stage: 0.0 for stage in self.weights}
        self._percent = 0.0
        self._lock = threading.Lock()

        self._bar = tqdm(
            total=100,
            desc="Frames",
            unit="%",
            disable=not show_bar,
            bar_format="{l_bar}{bar}| {n:.0f}%",
        )

    @property
    def percent(self) -> float:
        return self._percent

    def fraction(self, stage: Union[Stage, str]) -> float:
        return self._fractions.get(Stage(stage), 0.0)

    def report(self, stage: Union[Stage, str], fraction: float) -> float:
        """
        Record completion of a stage and return the combined percentage.

        Reports for dropped stages and reports lower than a previous one are ignored.
        """
        stage = Stage(stage)

        if not 0.0 <= fraction <= 1.0:
            raise ValueError(f"Stage fraction must be within [0, 1], got {fraction}")

        if stage is Stage.PUSH and self.push_to_cloud:
            stage = Stage.PROCESS

        if stage not in self.weights:
            logger.debug(f"Ignoring progress for inactive stage '{stage.value}'")
            return self._percent

        with self._lock:
            if fraction <= self._fractions[stage]:
                return self._percent

            self._fractions[stage] = fraction

            weighted = sum(self.weights[s] * f for s, f in self._fractions.items())
            percent = min(100.0, weighted / self._total_weight * 100)

            if percent > self._percent:
                self._bar.update(percent - self._percent)
                self._percent = percent

                if self.on_change is not None:
                    self.on_change(percent)

            return self._percent

    def close(self) -> None:
        self._bar.close()

    def __enter__(self) -> "ProgressTracker":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
