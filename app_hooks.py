from typing import Optional, Protocol


class AppHooks(Protocol):
    """
    Protocol for application hooks used while feeding long streams.

    Implemented by the calling application to show progress and to stop
    a pipeline run early.

    Methods:
        report_step(info, target, reset_counter, plus_step) -> None:
            Report progress.
        stop_requested() -> bool:
            Whether the run should stop.
    """
    def report_step(self, info: str = "", target: Optional[int] = None, reset_counter: bool = False, plus_step: int = 1) -> None:
        """
        Report progress of a pipeline run.

        Args:
            info (str): Progress message.
            target (int): Number of observations expected, if known.
            reset_counter (bool): Whether to reset the progress counter.
            plus_step (int): Number of observations processed since the last report.
        """
        pass

    def stop_requested(self) -> bool:
        """
        Check if a stop has been requested by the user.

        Returns:
            bool: True if stop is requested, False otherwise.
        """
        return False
