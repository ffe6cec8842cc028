"""Main form spamming orchestrator."""

import asyncio
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import EngineConfig, FieldSpec, Summary
from .engine import SubmissionEngine
from .generator import FormGenerator
from .parser import load_fields
from .schema import ProfileValidator, build_engine_config
from .signals import install_interrupt_handler
from .writer import ReportWriter


class Spammer:
    """Loads the configuration, then runs the engine until interrupted."""

    def __init__(self, fields_path: Path, profile_path: Optional[Path] = None,
                 overrides: Optional[Dict[str, Any]] = None,
                 report_path: Optional[Path] = None, verbose: bool = False,
                 quiet: bool = False):
        self.fields_path = fields_path
        self.profile_path = profile_path
        self.overrides = overrides or {}
        self.report_path = report_path
        self.verbose = verbose
        self.quiet = quiet

        # Initialized in run()
        self.fields: List[FieldSpec] = []
        self.config: Optional[EngineConfig] = None
        self.engine: Optional[SubmissionEngine] = None

    def load(self) -> EngineConfig:
        """Parse the field file and build the engine settings."""
        self._log("[1/4] Loading fields...")
        self.fields = load_fields(self.fields_path)
        self._log(f"      Fields: {len(self.fields)}")

        self._log("[2/4] Loading run profile...")
        profile = None
        if self.profile_path is not None:
            profile = ProfileValidator().validate(self.profile_path)
            self._log(f"      Profile: {self.profile_path}")
        self.config = build_engine_config(profile, **self.overrides)
        self._log(f"      Target: {self.config.url}")
        self._log(f"      Max open requests: {self.config.max_open}")
        self._log(f"      Timeout: {self.config.timeout:g}s")
        return self.config

    def run(self) -> Summary:
        """Run until SIGINT or SIGTERM and return the final summary."""
        self.load()
        return asyncio.run(self._run_async())

    async def _run_async(self) -> Summary:
        self._log("[3/4] Installing interrupt handler...")
        stop_event = asyncio.Event()
        remove_handler = install_interrupt_handler(asyncio.get_running_loop(), stop_event)

        writer = ReportWriter(output_path=self.report_path, quiet=self.quiet)
        writer.initialize()
        self.engine = SubmissionEngine(self.fields, self.config, stop_event=stop_event,
                                       writer=writer)

        self._log("[4/4] Posting forms (Ctrl-C to stop)...")
        try:
            return await self.engine.run()
        finally:
            remove_handler()

    def _log(self, message: str) -> None:
        """Log message if verbose mode is enabled."""
        if self.verbose:
            print(message)


def sample_forms(fields_path: Path, count: int, seed: Optional[int] = None) -> List[Dict[str, str]]:
    """Generate ``count`` parameter maps without sending anything."""
    fields = load_fields(fields_path)
    generator = FormGenerator(seed=seed)
    return [generator.generate(fields) for _ in range(count)]
