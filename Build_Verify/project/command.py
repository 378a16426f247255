import os
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

from Build_Verify.core.errors import BuildError, ManifestError
from Build_Verify.core.logger import LogSink, log as default_log


DEFAULT_OUTPUT_DIR = "out"
STDERR_TAIL_LINES = 20

Step = Union[str, List[str]]


def _check_steps(raw: Any) -> List[Step]:
    if not isinstance(raw, list) or not raw:
        raise ManifestError("'steps' must be a non-empty list of commands")

    steps: List[Step] = []
    for i, step in enumerate(raw, 1):
        if isinstance(step, str) and step.strip():
            steps.append(step)
        elif isinstance(step, list) and step and all(isinstance(a, str) for a in step):
            steps.append(list(step))
        else:
            raise ManifestError(
                f"step {i} must be a shell string or a list of arguments, got {step!r}"
            )
    return steps


def _tail(text: str, lines: int = STDERR_TAIL_LINES) -> str:
    return "\n".join((text or "").strip().splitlines()[-lines:])


@dataclass
class CommandProject:
    """
    Project whose build is a list of commands run in the project root.

    Manifest keys:
        steps   list of shell strings or argv lists (required)
        output  output directory relative to the root (default "out")
        env     extra environment variables
        clean   remove the output directory before building
    """
    root: Path
    steps: List[Step]
    output_dir: Path
    env: Dict[str, str] = field(default_factory=dict)
    clean: bool = False
    log: LogSink = default_log

    @classmethod
    def from_manifest(
        cls,
        manifest: Dict[str, Any],
        project_root: Path,
        log: LogSink = default_log,
    ) -> "CommandProject":
        env = manifest.get("env") or {}
        if not isinstance(env, dict):
            raise ManifestError("'env' must be a mapping")

        output = manifest.get("output", DEFAULT_OUTPUT_DIR)
        if not isinstance(output, str) or not output.strip():
            raise ManifestError("'output' must be a non-empty path")

        root = Path(project_root)
        return cls(
            root=root,
            steps=_check_steps(manifest.get("steps")),
            output_dir=root / output,
            env={str(k): str(v) for k, v in env.items()},
            clean=bool(manifest.get("clean", False)),
            log=log,
        )

    def run(self) -> None:
        try:
            if self.clean and self.output_dir.exists():
                self.log("INFO", "build", f"Cleaning {self.output_dir}")
                shutil.rmtree(self.output_dir)
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise BuildError(f"Cannot prepare output directory {self.output_dir}: {exc}") from exc

        env = {**os.environ, **self.env}

        for i, step in enumerate(self.steps, 1):
            shell = isinstance(step, str)
            shown = step if shell else " ".join(step)
            self.log("INFO", "build", f"[{i}/{len(self.steps)}] {shown}")

            try:
                proc = subprocess.run(
                    step,
                    cwd=self.root,
                    env=env,
                    shell=shell,
                    capture_output=True,
                    text=True,
                )
            except OSError as exc:
                raise BuildError(f"step {i} could not be started ({shown}): {exc}") from exc

            if proc.stdout:
                self.log("DEBUG", "build", proc.stdout.rstrip())

            if proc.returncode != 0:
                message = f"step {i} exited with status {proc.returncode}: {shown}"
                stderr = _tail(proc.stderr)
                if stderr:
                    message += f"\n{stderr}"
                raise BuildError(message)
