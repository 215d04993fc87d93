from __future__ import annotations

import subprocess
import time
from typing import List, Optional

from loguru import logger

from brainvault.core.interfaces import ERROR_PREFIX, ReasoningService


class ClaudeCliProvider(ReasoningService):
    """Runs prompts through the ``claude`` command-line client in print mode."""

    def __init__(self, claude_path: str = "claude", model: Optional[str] = None, timeout: float = 120) -> None:
        self.claude_path = claude_path
        self.model = model
        self.timeout = timeout

    def complete(self, prompt: str) -> str:
        started = time.monotonic()
        logger.debug("Spawning Claude CLI: {}", prompt[:80])
        try:
            result = subprocess.run(
                self._command(prompt),
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            logger.warning("Claude CLI timed out after {}s", self.timeout)
            return f"{ERROR_PREFIX} Claude CLI timed out after {self.timeout}s"
        except OSError as exc:
            logger.error("Claude CLI spawn error: {}", exc)
            return f"{ERROR_PREFIX} {exc}"

        logger.info(
            "Claude CLI completed with exit code {} in {:.1f}s",
            result.returncode,
            time.monotonic() - started,
        )
        if result.returncode != 0:
            logger.error("Claude CLI failed: {}", result.stderr.strip())
            return f"{ERROR_PREFIX} Claude CLI exited with code {result.returncode}"
        return result.stdout.strip()

    def _command(self, prompt: str) -> List[str]:
        command = [self.claude_path, "--print", prompt]
        if self.model:
            command.extend(["--model", self.model])
        return command
