"""Ordered execution of remote mutation steps."""

from typing import Callable, List, Optional

from ..model.deployment import MutationStep
from ..utils.logger import get_logger

logger = get_logger(__name__)

StepApplier = Callable[[object, MutationStep], None]


def apply_on_target(target, step: MutationStep) -> None:
    target.apply(step)


class MutationPipeline:
    """Runs mutation steps in order and stops at the first failure.

    A failing step's exception is re-raised as is. Steps that already ran are
    not undone; re-running the whole upgrade is the recovery path.
    """

    def __init__(
        self,
        applier: StepApplier = apply_on_target,
        on_step: Optional[Callable[[int, int, MutationStep], None]] = None,
    ):
        self.applier = applier
        self.on_step = on_step

    def execute(
        self,
        target,
        steps: List[MutationStep],
        on_step: Optional[Callable[[int, int, MutationStep], None]] = None,
    ) -> int:
        """Apply ``steps`` to ``target`` and return how many were applied.

        ``on_step`` replaces the pipeline's own reporter for this call.
        """
        report = on_step or self.on_step
        total = len(steps)
        for index, step in enumerate(steps, start=1):
            if report:
                report(index, total, step)
            logger.debug(f"Step {index}/{total}: {step}")
            self.applier(target, step)

        logger.info(f"Applied {total} step(s) to {target}")
        return total
