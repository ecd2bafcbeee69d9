"""Configuration management for hdfs-shell"""

import os

from .lease import DEFAULT_LEASE_TIMEOUT, DEFAULT_POLL_INTERVAL


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}") from None


def _env_int(name: str):
    value = os.getenv(name)
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


class Config:
    """Configuration for the HDFS shell

    Raises ValueError when a setting is malformed or out of range.
    """

    def __init__(self):
        self.scheme = os.getenv("HDFS_SHELL_SCHEME", "http")
        self.timeout = _env_float("HDFS_SHELL_TIMEOUT", 30.0)
        # None means: ask the namenode
        self.replication = _env_int("HDFS_SHELL_REPLICATION")
        self.lease_timeout = _env_float("HDFS_SHELL_LEASE_TIMEOUT", DEFAULT_LEASE_TIMEOUT)
        self.poll_interval = _env_float("HDFS_SHELL_POLL_INTERVAL", DEFAULT_POLL_INTERVAL)
        self.local_dir = os.getenv("HDFS_SHELL_LOCAL_DIR") or os.path.expanduser("~")
        self.history_file = os.getenv("HDFS_SHELL_HISTORY", "~/.hdfs_shell_history")
        self.log_level = os.getenv("HDFS_SHELL_LOG_LEVEL", "WARNING")
        self.validate()

    def validate(self) -> None:
        if self.scheme not in ("http", "https"):
            raise ValueError(f"scheme must be http or https, got {self.scheme!r}")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if self.replication is not None and self.replication < 1:
            raise ValueError(f"replication must be at least 1, got {self.replication}")
        if self.lease_timeout < 0:
            raise ValueError(f"lease timeout must not be negative, got {self.lease_timeout}")
        if self.poll_interval <= 0:
            raise ValueError(f"poll interval must be positive, got {self.poll_interval}")

    @classmethod
    def from_env(cls):
        """Create configuration from environment variables"""
        return cls()

    @classmethod
    def from_args(cls, **overrides):
        """Create configuration from command line arguments

        Arguments left as None keep the environment/default value.
        """
        config = cls()
        for key, value in overrides.items():
            if not hasattr(config, key):
                raise TypeError(f"unknown configuration option: {key}")
            if value is not None:
                setattr(config, key, value)
        config.validate()
        return config

    def __repr__(self):
        return (
            f"Config(scheme={self.scheme}, timeout={self.timeout}, "
            f"replication={self.replication}, lease_timeout={self.lease_timeout}, "
            f"poll_interval={self.poll_interval}, local_dir={self.local_dir})"
        )
