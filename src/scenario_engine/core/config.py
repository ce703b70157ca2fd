# src/scenario_engine/core/config.py
"""Configuration parsing and validation."""

from __future__ import annotations

import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List, TYPE_CHECKING
from dataclasses import dataclass, field
import logging
import os

from ..scenarios.loader import DEFAULT_EXCLUDES, DEFAULT_INCLUDES
from ..scenarios.models import Backoff, RetryPolicy, StepOptions

if TYPE_CHECKING:
    from ..runner.results import RunOptions
    from ..utils.signal import CancellationSignal

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@dataclass
class RunnerConfig:
    """Run-level limits."""
    max_concurrency: int = 0
    max_failures: int = 0
    timeout: Optional[float] = None

    def validate(self) -> None:
        """Validate runner configuration."""
        if self.max_concurrency < 0:
            raise ValueError(f"max_concurrency must be non-negative: {self.max_concurrency}")

        if self.max_failures < 0:
            raise ValueError(f"max_failures must be non-negative: {self.max_failures}")

        if self.timeout is not None and self.timeout < 0:
            raise ValueError(f"timeout must be non-negative: {self.timeout}")


@dataclass
class StepDefaultsConfig:
    """Defaults applied to steps that do not set their own timeout or retry."""
    timeout: float = 30.0
    max_attempts: int = 1
    backoff: str = "linear"
    base_delay: float = 1.0

    def validate(self) -> None:
        """Validate step defaults."""
        if self.timeout < 0:
            raise ValueError(f"Step timeout must be non-negative: {self.timeout}")

        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1: {self.max_attempts}")

        if self.backoff not in [b.value for b in Backoff]:
            raise ValueError(f"Invalid backoff: {self.backoff}. Must be linear or exponential")

        if self.base_delay < 0:
            raise ValueError(f"base_delay must be non-negative: {self.base_delay}")

    def to_step_options(self) -> StepOptions:
        return StepOptions(
            timeout=self.timeout,
            retry=RetryPolicy(
                max_attempts=self.max_attempts,
                backoff=Backoff(self.backoff),
                base_delay=self.base_delay,
            ),
        )


@dataclass
class DiscoveryConfig:
    """Scenario file discovery patterns."""
    includes: List[str] = field(default_factory=lambda: list(DEFAULT_INCLUDES))
    excludes: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDES))

    def validate(self) -> None:
        """Validate discovery configuration."""
        if not self.includes:
            raise ValueError("At least one include pattern is required")


@dataclass
class MetricsConfig:
    """Prometheus export configuration."""
    prometheus_pushgateway: Optional[str] = None
    job_name: str = "scenario_engine"

    def validate(self) -> None:
        """Validate metrics configuration."""
        if not self.job_name:
            raise ValueError("job_name must not be empty")


@dataclass
class OutputConfig:
    """Output configuration."""
    results_path: Optional[Path] = None
    log_level: str = "INFO"

    def validate(self) -> None:
        """Validate output configuration."""
        if self.results_path is not None:
            self.results_path.parent.mkdir(parents=True, exist_ok=True)

        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.log_level}")


class Config:
    """Main configuration container."""

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize configuration."""
        self.config_path = config_path
        self.data: Dict[str, Any] = {}

        # Initialize with defaults
        self.runner = RunnerConfig()
        self.step_defaults = StepDefaultsConfig()
        self.discovery = DiscoveryConfig()
        self.metrics = MetricsConfig()
        self.output = OutputConfig()

        if config_path:
            self.load()
        else:
            self._merge_env_vars()
            self._update_from_dict()
            self.validate()

    def load(self) -> None:
        """Load configuration from file."""
        if not self.config_path:
            raise ValueError("No configuration path specified")

        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        logger.info(f"Loading configuration from {self.config_path}")

        try:
            with open(self.config_path, 'r') as f:
                self.data = yaml.safe_load(f) or {}

            if not isinstance(self.data, dict):
                raise ValueError(f"Configuration root must be a mapping: {self.config_path}")

            # Environment overrides file values
            self._merge_env_vars()

            self._update_from_dict()
            self.validate()

            logger.info("Configuration loaded successfully")

        except yaml.YAMLError as e:
            logger.error(f"Failed to parse YAML configuration: {e}")
            raise
        except Exception as e:
            logger.error(f"Failed to load configuration: {e}")
            raise

    def _merge_env_vars(self) -> None:
        """Merge environment variables into configuration."""
        if "SCE_MAX_CONCURRENCY" in os.environ:
            self.data.setdefault("runner", {})["max_concurrency"] = int(os.environ["SCE_MAX_CONCURRENCY"])
        if "SCE_MAX_FAILURES" in os.environ:
            self.data.setdefault("runner", {})["max_failures"] = int(os.environ["SCE_MAX_FAILURES"])
        if "SCE_TIMEOUT" in os.environ:
            self.data.setdefault("runner", {})["timeout"] = float(os.environ["SCE_TIMEOUT"])

        if "SCE_STEP_TIMEOUT" in os.environ:
            self.data.setdefault("step_defaults", {})["timeout"] = float(os.environ["SCE_STEP_TIMEOUT"])
        if "SCE_STEP_MAX_ATTEMPTS" in os.environ:
            self.data.setdefault("step_defaults", {})["max_attempts"] = int(os.environ["SCE_STEP_MAX_ATTEMPTS"])
        if "SCE_STEP_BACKOFF" in os.environ:
            self.data.setdefault("step_defaults", {})["backoff"] = os.environ["SCE_STEP_BACKOFF"]

        if "SCE_LOG_LEVEL" in os.environ:
            self.data.setdefault("output", {})["log_level"] = os.environ["SCE_LOG_LEVEL"]
        if "SCE_RESULTS_PATH" in os.environ:
            self.data.setdefault("output", {})["results_path"] = os.environ["SCE_RESULTS_PATH"]

        if "SCE_PROMETHEUS_PUSHGATEWAY" in os.environ:
            self.data.setdefault("metrics", {})["prometheus_pushgateway"] = os.environ["SCE_PROMETHEUS_PUSHGATEWAY"]

    def _update_from_dict(self) -> None:
        """Update configuration objects from loaded data."""
        if "runner" in self.data:
            runner_data = self.data["runner"] or {}
            self.runner = RunnerConfig(
                max_concurrency=runner_data.get("max_concurrency", self.runner.max_concurrency),
                max_failures=runner_data.get("max_failures", self.runner.max_failures),
                timeout=runner_data.get("timeout", self.runner.timeout),
            )

        if "step_defaults" in self.data:
            step_data = self.data["step_defaults"] or {}
            self.step_defaults = StepDefaultsConfig(
                timeout=step_data.get("timeout", self.step_defaults.timeout),
                max_attempts=step_data.get("max_attempts", self.step_defaults.max_attempts),
                backoff=step_data.get("backoff", self.step_defaults.backoff),
                base_delay=step_data.get("base_delay", self.step_defaults.base_delay),
            )

        if "discovery" in self.data:
            discovery_data = self.data["discovery"] or {}
            self.discovery = DiscoveryConfig(
                includes=list(discovery_data.get("includes", self.discovery.includes)),
                excludes=list(discovery_data.get("excludes", self.discovery.excludes)),
            )

        if "metrics" in self.data:
            metrics_data = self.data["metrics"] or {}
            self.metrics = MetricsConfig(
                prometheus_pushgateway=metrics_data.get("prometheus_pushgateway", self.metrics.prometheus_pushgateway),
                job_name=metrics_data.get("job_name", self.metrics.job_name),
            )

        if "output" in self.data:
            output_data = self.data["output"] or {}
            results_path = output_data.get("results_path", self.output.results_path)
            self.output = OutputConfig(
                results_path=Path(results_path) if results_path is not None else None,
                log_level=output_data.get("log_level", self.output.log_level),
            )

    def validate(self) -> None:
        """Validate all configuration sections."""
        try:
            self.runner.validate()
            self.step_defaults.validate()
            self.discovery.validate()
            self.metrics.validate()
            self.output.validate()
        except Exception as e:
            logger.error(f"Configuration validation failed: {e}")
            raise

    def to_run_options(self, signal: Optional["CancellationSignal"] = None) -> "RunOptions":
        """Build ``RunOptions`` for the top-level runner."""
        from ..runner.results import RunOptions

        return RunOptions(
            max_concurrency=self.runner.max_concurrency,
            max_failures=self.runner.max_failures,
            timeout=self.runner.timeout,
            signal=signal,
            step_defaults=self.step_defaults.to_step_options(),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "runner": {
                "max_concurrency": self.runner.max_concurrency,
                "max_failures": self.runner.max_failures,
                "timeout": self.runner.timeout,
            },
            "step_defaults": {
                "timeout": self.step_defaults.timeout,
                "max_attempts": self.step_defaults.max_attempts,
                "backoff": self.step_defaults.backoff,
                "base_delay": self.step_defaults.base_delay,
            },
            "discovery": {
                "includes": list(self.discovery.includes),
                "excludes": list(self.discovery.excludes),
            },
            "metrics": {
                "prometheus_pushgateway": self.metrics.prometheus_pushgateway,
                "job_name": self.metrics.job_name,
            },
            "output": {
                "results_path": str(self.output.results_path) if self.output.results_path else None,
                "log_level": self.output.log_level,
            },
        }


class ConfigValidator:
    """Validates configuration values."""

    @staticmethod
    def validate(config: Dict[str, Any]) -> bool:
        """Validate configuration dictionary."""
        try:
            temp_config = Config()
            temp_config.data = dict(config)
            temp_config._update_from_dict()
            temp_config.validate()
            return True
        except Exception as e:
            logger.error(f"Configuration validation failed: {e}")
            return False
