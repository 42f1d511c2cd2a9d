from __future__ import annotations

from typing import Optional


class EmulatorDemoError(Exception):
    exit_code = 1


class ConfigurationError(EmulatorDemoError):
    exit_code = 2


class StepError(EmulatorDemoError):
    def __init__(self, step: str, cause: Optional[BaseException] = None) -> None:
        self.step = step
        self.cause = cause
        if cause is None:
            super().__init__(f"error {step}")
        else:
            super().__init__(f"error {step}: {str(cause) or type(cause).__name__}")


class RunCancelled(StepError):
    exit_code = 130


class DeadlineExceeded(RunCancelled):
    exit_code = 124
